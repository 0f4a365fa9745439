"""Tests for ghostredact — registry, validators, masking and the engine."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import hashlib
import re

import pytest

from ghostredact import ConfigurationError, RegexRule, Redactor, RedactorConfig
from ghostredact.masking import mask_card, mask_email, mask_keep_last_digits, replace
from ghostredact.patterns import DEFAULT_KINDS, builtin_rule, compile_custom
from ghostredact.redactor import plan_order, resolve_policy
from ghostredact.validators import is_card_number, luhn_ok


def _found(kind, text):
    return [m.group() for m in builtin_rule(kind).finditer(text)]


# ── Pattern registry ─────────────────────────────────────────────────

def test_email_detection():
    assert _found("email", "Contact me at alice@example.com please") == ["alice@example.com"]


def test_email_is_case_insensitive():
    assert _found("email", "MAIL: Bob.Smith@Example.ORG") == ["Bob.Smith@Example.ORG"]


def test_ipv4_detection():
    assert _found("ipv4", "Server at 192.168.1.100") == ["192.168.1.100"]


def test_ipv6_detection_upper_case_only():
    assert _found("ipv6", "2001:0DB8:85A3:0000:0000:8A2E:0370:7334") == ["2001:0DB8:85A3:0000:0000:8A2E:0370:7334"]
    assert _found("ipv6", "addr fe80:0:0:0:202:b3ff:fe1e:8329 up") == []


def test_iban_detection():
    assert _found("iban", "IBAN DE89370400440532013000.") == ["DE89370400440532013000"]


def test_brazil_ids():
    assert _found("cpf", "CPF 123.456.789-09") == ["123.456.789-09"]
    assert _found("cnpj", "CNPJ 12.345.678/0001-95") == ["12.345.678/0001-95"]
    assert _found("rg", "RG 12.345.678-9") == ["12.345.678-9"]
    assert _found("cep", "CEP 01310-100") == ["01310-100"]


def test_unknown_builtin():
    assert builtin_rule("passport") is None


def test_custom_rule_is_plain_regex_rule():
    rule = compile_custom("ticket", r"TCK\d+")
    assert rule == RegexRule("ticket", re.compile(r"TCK\d+"))
    assert [m.group() for m in rule.finditer("a TCK12 b")] == ["TCK12"]


def test_custom_compile_error_names_kind():
    with pytest.raises(ConfigurationError) as exc:
        compile_custom("ticket", "(unclosed")
    assert exc.value.kind == "ticket"
    assert "ticket" in str(exc.value)


# ── Validators ───────────────────────────────────────────────────────

def test_luhn_valid_card():
    assert luhn_ok("4539148803436467")
    assert is_card_number("4539148803436467")


def test_luhn_off_by_one():
    assert not luhn_ok("4539148803436468")
    assert not is_card_number("4539148803436468")


def test_card_with_separators():
    assert is_card_number("4539 1488 0343 6467")
    assert is_card_number("4539-1488-0343-6467")


def test_card_length_bounds():
    # All zeros is Luhn-valid at any length
    assert luhn_ok("0" * 12) and luhn_ok("0" * 20)
    assert not is_card_number("0" * 12)
    assert is_card_number("0" * 13)
    assert is_card_number("0" * 19)
    assert not is_card_number("0" * 20)


# ── Replacement strategy ─────────────────────────────────────────────

def test_mask_email():
    assert mask_email("ab@example.com") == "a*@example.com"
    assert mask_email("alice@example.com") == "a****@example.com"


def test_mask_email_short_local_part():
    assert mask_email("a@example.com") == "<EMAIL>"


def test_mask_card_uses_digit_count():
    assert mask_card("4539 1488 0343 6467") == "*" * 12 + "6467"
    assert mask_card("12") == "<CC>"


def test_mask_phone_keeps_format():
    assert mask_keep_last_digits("+1 (555) 123-4567") == "+* (***) ***-4567"
    assert mask_keep_last_digits("123") == "123"


def test_tag_mode():
    assert replace("tag", "cpf", "123.456.789-09") == "<CPF>"
    assert replace("tag", "employee_id", "EMP-1") == "<EMPLOYEE_ID>"


def test_hash_mode():
    out = replace("hash", "email", "ab@example.com", salt="pepper")
    expected = hashlib.sha256(b"pepperab@example.com").hexdigest()[:16]
    assert out == f"<EMAIL:{expected}>"
    assert re.fullmatch(r"<EMAIL:[0-9a-f]{16}>", out)


def test_hash_mode_empty_salt():
    expected = hashlib.sha256(b"10.0.0.1").hexdigest()[:16]
    assert replace("hash", "ipv4", "10.0.0.1") == f"<IPV4:{expected}>"


def test_unknown_mode_falls_back_to_mask():
    assert replace("scramble", "email", "ab@example.com") == "a*@example.com"
    assert replace("", "cc", "4539148803436467") == "************6467"


def test_mask_without_bespoke_rule_is_tag():
    assert replace("mask", "iban", "DE89370400440532013000") == "<IBAN>"
    assert replace("mask", "employee_id", "EMP-123456") == "<EMPLOYEE_ID>"


# ── Policy resolution & ordering ─────────────────────────────────────

def test_defaults():
    enabled, rules, customs = resolve_policy(RedactorConfig())
    assert enabled == set(DEFAULT_KINDS)
    assert set(rules) == set(DEFAULT_KINDS)
    assert customs == []


def test_locale_pack_unions_with_explicit():
    enabled, _, _ = resolve_policy(RedactorConfig(types="email", locale="br"))
    assert enabled == {"email", "cpf", "cnpj", "cep", "rg"}


def test_locale_pack_adds_to_defaults():
    enabled, _, _ = resolve_policy(RedactorConfig(locale=" BR , nowhere"))
    assert enabled == set(DEFAULT_KINDS) | {"cpf", "cnpj", "cep", "rg"}


def test_explicit_types_accept_iterables():
    enabled, _, _ = resolve_policy(RedactorConfig(types=["Email", " cc "]))
    assert enabled == {"email", "cc"}


def test_unknown_types_never_match():
    r = Redactor(RedactorConfig(types="bogus,email"))
    assert r.kinds == ("email",)


def test_blank_custom_entries_dropped():
    _, rules, customs = resolve_policy(RedactorConfig(custom={"  ": "x+", "k": "   "}))
    assert customs == []
    assert set(rules) == set(DEFAULT_KINDS)


def test_canonical_order():
    r = Redactor(RedactorConfig(
        types="iban,email,cc",
        locale="br",
        custom={"zeta": "Z+", "alpha": "A+"},
    ))
    assert r.kinds == ("email", "cc", "cpf", "cnpj", "rg", "cep", "iban", "zeta", "alpha")


def test_plan_order_dedupes():
    _, rules, _ = resolve_policy(RedactorConfig(types="email"))
    assert plan_order(rules, ["email", "email"]) == ("email",)


def test_custom_overrides_builtin_once():
    r = Redactor(RedactorConfig(mode="tag", custom={"email": r"secret\d+"}))
    assert r.kinds.count("email") == 1
    assert r.kinds[0] == "email"
    assert r.redact("ab@example.com secret42") == "ab@example.com <EMAIL>"
    assert r.snapshot_counts() == {"email": 1}


def test_bad_custom_regex_fails_construction():
    with pytest.raises(ConfigurationError) as exc:
        Redactor(RedactorConfig(custom={"ok": "K\\d+", "bad": "(unclosed"}))
    assert exc.value.kind == "bad"


# ── Redactor ─────────────────────────────────────────────────────────

def test_redact_email_tag():
    r = Redactor(RedactorConfig(mode="tag"))
    assert r.redact("Email: john@acme.com") == "Email: <EMAIL>"
    assert r.snapshot_counts() == {"email": 1}


def test_redact_card_mask():
    r = Redactor()
    assert r.redact("Card 4539 1488 0343 6467 ok") == "Card ************6467 ok"
    assert r.snapshot_counts() == {"cc": 1}


def test_invalid_card_left_untouched():
    r = Redactor(RedactorConfig(types="cc"))
    text = "Card 4539 1488 0343 6468 ok"
    assert r.redact(text) == text
    assert r.snapshot_counts() == {}


def test_redact_phone_mask():
    r = Redactor(RedactorConfig(types="phone"))
    assert r.redact("Call +1 (555) 123-4567 now") == "Call +* (***) ***-4567 now"
    assert r.snapshot_counts() == {"phone": 1}


def test_cpf_not_swallowed_by_phone():
    r = Redactor(RedactorConfig(locale="br"))
    assert r.redact("CPF 123.456.789-09") == "CPF <CPF>"
    assert r.snapshot_counts() == {"cpf": 1}


def test_custom_pattern():
    r = Redactor(RedactorConfig(custom={"employee_id": r"EMP-\d{6}"}))
    assert r.redact("badge EMP-123456") == "badge <EMPLOYEE_ID>"
    assert r.snapshot_counts() == {"employee_id": 1}


def test_empty_custom_match_after_match_skipped():
    r = Redactor(RedactorConfig(mode="tag", types="email", custom={"k": "a*"}))
    assert r.redact("bab") == "<K>b<K>b<K>"
    assert r.snapshot_counts() == {"k": 3}


def test_counts_accumulate():
    r = Redactor()
    r.redact("x ab@example.com")
    r.redact("cd@example.org")
    assert r.snapshot_counts()["email"] == 2


def test_snapshot_is_a_copy():
    r = Redactor()
    r.redact("ab@example.com")
    snap = r.snapshot_counts()
    snap["email"] = 99
    assert r.counts() == {"email": 1}


def test_tag_mode_idempotent():
    r = Redactor(RedactorConfig(mode="tag"))
    once = r.redact("mail ab@example.com ip 10.0.0.1 card 4539148803436467")
    assert once == "mail <EMAIL> ip <IPV4> card <CC>"
    assert r.redact(once) == once
    assert r.snapshot_counts() == {"email": 1, "cc": 1, "ipv4": 1}


def test_hash_mode_idempotent():
    r = Redactor(RedactorConfig(mode="hash", types="email", salt="s"))
    once = r.redact("ab@example.com")
    assert r.redact(once) == once
    assert r.snapshot_counts() == {"email": 1}


def test_hash_deterministic_across_instances():
    cfg = RedactorConfig(mode="hash", salt="pepper")
    a = Redactor(cfg).redact("to ab@example.com")
    b = Redactor(cfg).redact("to ab@example.com")
    assert a == b
    c = Redactor(RedactorConfig(mode="hash", salt="salt")).redact("to ab@example.com")
    assert a != c


def test_redact_never_raises_on_odd_input():
    r = Redactor()
    assert r.redact("") == ""
    assert r.redact("@@@ \x00 <<>>") == "@@@ \x00 <<>>"


# ── Documents & lines ────────────────────────────────────────────────

def test_redact_document():
    r = Redactor(RedactorConfig(mode="tag"))
    doc = {
        "user": {"email": "ab@example.com", "age": 42, "tags": ["ip 10.0.0.1", None, True]},
        "n": 1.5,
    }
    out = r.redact_document(doc)
    assert out == {
        "user": {"email": "<EMAIL>", "age": 42, "tags": ["ip <IPV4>", None, True]},
        "n": 1.5,
    }
    assert doc["user"]["email"] == "ab@example.com"   # not mutated
    assert r.snapshot_counts() == {"email": 1, "ipv4": 1}


def test_redact_lines_sequential():
    r = Redactor(RedactorConfig(mode="tag"))
    assert list(r.redact_lines(["a ab@example.com", "plain"])) == ["a <EMAIL>", "plain"]


def test_redact_lines_parallel_merges_counts():
    r = Redactor(RedactorConfig(mode="tag"))
    lines = [f"line {i} user{i}@example.com" for i in range(10)]
    out = list(r.redact_lines(lines, workers=4, chunk_size=2))
    assert out == [f"line {i} <EMAIL>" for i in range(10)]
    assert r.snapshot_counts() == {"email": 10}


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
