import jwt
import pytest

from event_pass.services.tokens import InvalidToken, TokenCodec


def test_round_trip(codec):
    token = codec.issue(12, 34)
    claim = codec.verify(token)
    assert claim.student_id == 12
    assert claim.event_id == 34
    assert claim.issued_at > 0


def test_issued_at_is_kept(codec):
    claim = codec.verify(codec.issue(1, 2, issued_at=1700000000123))
    assert claim.issued_at == 1700000000123


def test_any_single_character_change_is_rejected(codec):
    token = codec.issue(7, 99)
    for i, ch in enumerate(token):
        mutated = token[:i] + ("A" if ch != "A" else "B") + token[i + 1:]
        with pytest.raises(InvalidToken):
            codec.verify(mutated)


def test_other_secret_is_rejected(codec):
    forged = TokenCodec("someone-else").issue(7, 99)
    with pytest.raises(InvalidToken):
        codec.verify(forged)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b", "a.b.c.d", "ééé.ééé.ééé"])
def test_malformed_tokens(codec, garbage):
    with pytest.raises(InvalidToken):
        codec.verify(garbage)


def test_missing_or_bad_claims_are_rejected():
    secret = "test-pass-secret"
    codec = TokenCodec(secret)
    missing = jwt.encode({"studentId": 1}, secret, algorithm="HS256")
    bool_id = jwt.encode({"studentId": True, "eventId": 1, "issuedAt": 1}, secret, algorithm="HS256")
    text_id = jwt.encode({"studentId": "1", "eventId": 1, "issuedAt": 1}, secret, algorithm="HS256")
    for token in (missing, bool_id, text_id):
        with pytest.raises(InvalidToken):
            codec.verify(token)


def test_unsigned_token_is_rejected(codec):
    unsigned = jwt.encode({"studentId": 1, "eventId": 1, "issuedAt": 1}, None, algorithm="none")
    with pytest.raises(InvalidToken):
        codec.verify(unsigned)


def test_empty_secret_not_allowed():
    with pytest.raises(ValueError):
        TokenCodec("")
