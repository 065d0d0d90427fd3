"""Tests for the redaction engine."""

from secret_redactor import Redactor, RedactorConfig
from secret_redactor.types import Match, PolicyBreak, ScanResult

TOKEN = "ghp_" + "X" * 36


def _result(*spans, kind="GitHub Token", policy="Secrets detection"):
    """ScanResult with one policy break per (start, inclusive_end) span."""
    return ScanResult(policy_breaks=tuple(
        PolicyBreak(policy=policy, kind=kind, matches=(Match(start=s, end=e, policy=policy),))
        for s, e in spans
    ))


# ── No-op ────────────────────────────────────────────────────────────

def test_no_policy_breaks_returns_content_unchanged():
    result = Redactor().redact("This is safe content", ScanResult())
    assert result.content == "This is safe content"
    assert result.redactions == []


def test_absent_scan_result_returns_content_unchanged():
    result = Redactor().redact("This is safe content", None)
    assert result.content == "This is safe content"
    assert result.redactions == []


# ── Single match ─────────────────────────────────────────────────────

def test_github_token_redacted():
    content = f"My token is: {TOKEN}"
    assert content.index(TOKEN) == 13

    result = Redactor().redact(content, _result((13, 52), policy="github_token"))

    assert result.content == "My token is: REDACTED"
    assert TOKEN not in result.content
    assert len(result.redactions) == 1
    r = result.redactions[0]
    assert (r.start, r.end) == (13, 53)
    assert r.original == TOKEN
    assert r.policy == "github_token"
    assert r.kind == "GitHub Token"


def test_only_the_flagged_span_changes():
    content = "abcdefghij"
    result = Redactor().redact(content, _result((3, 5)))
    assert result.content == "abc" + "REDACTED" + "ghij"
    assert result.redactions[0].original == "def"


def test_custom_marker():
    result = Redactor(RedactorConfig(marker="[secret]")).redact("key=abc", _result((4, 6)))
    assert result.content == "key=[secret]"


# ── Multiple matches ─────────────────────────────────────────────────

def test_multiple_matches_applied_highest_offset_first():
    content = "My API key is sk_live_123456789 and my password is secret123"
    key_start = content.index("sk_live")
    pw_start = content.index("secret123")
    result = Redactor().redact(content, _result(
        (key_start, key_start + len("sk_live_123456789") - 1),
        (pw_start, pw_start + len("secret123") - 1),
    ))

    assert result.content == "My API key is REDACTED and my password is REDACTED"
    assert [r.start for r in result.redactions] == [pw_start, key_start]
    assert [r.original for r in result.redactions] == ["secret123", "sk_live_123456789"]


def test_identical_spans_redacted_once():
    content = "user=admin pass=hunter2"
    result = Redactor().redact(content, ScanResult(policy_breaks=(
        PolicyBreak(policy="Secrets detection", kind="Username Password",
                    matches=(Match(start=5, end=22),)),
        PolicyBreak(policy="Secrets detection", kind="Generic Password",
                    matches=(Match(start=5, end=22),)),
    )))
    assert result.content == "user=REDACTED"
    assert len(result.redactions) == 1


def test_matches_without_offsets_are_skipped():
    content = "nothing to see"
    result = Redactor().redact(content, ScanResult(policy_breaks=(
        PolicyBreak(policy="p", kind="t", matches=(Match(start=None, end=4), Match(start=0, end=None))),
    )))
    assert result.content == content
    assert result.redactions == []


def test_nested_ranges_both_applied():
    # Overlapping but non-identical spans are not merged; the outer splice
    # runs on text already edited by the inner one.
    content = "MyToken: ghp_abcdefghijklmnopqrstuvwxyz12"
    result = Redactor().redact(content, _result((9, 40), (0, 40)))

    assert len(result.redactions) == 2
    assert result.content == "REDACTED"
    assert result.redactions[0].original == "ghp_abcdefghijklmnopqrstuvwxyz12"
    assert result.redactions[1].original == content


def test_document_name_recorded():
    result = Redactor().redact("abc", _result((0, 2)), document="data.json.part1")
    assert result.redactions[0].document == "data.json.part1"
    assert result.redactions[0].to_dict()["document"] == "data.json.part1"


# ── Whole JSON values ────────────────────────────────────────────────

def test_json_tokens_touched_by_span_become_marker():
    body = '{"id":7,"token":"' + TOKEN + '"}'
    i = body.index(TOKEN)
    spliced = Redactor().redact(body, _result((i - 2, i + len(TOKEN) - 1)))
    assert spliced.content == '{"id":7,"token"REDACTED"}'

    fixed = Redactor().redact_json_tokens(body, spliced.redactions)
    assert fixed == '{"id":7,"token":"REDACTED"}'


def test_json_tokens_leave_untouched_values_alone():
    body = '[1,"a\\"b",true]'
    r = Redactor().redact(body, _result((3, 4)))
    assert Redactor().redact_json_tokens(body, r.redactions) == '[1,"REDACTED",true]'
