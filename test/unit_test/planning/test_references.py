from __future__ import annotations

import pytest

from toolmesh_ai.planning.references import (
    MISSING,
    Index,
    Key,
    ReferenceSyntaxError,
    evaluate,
    is_reference,
    parse_reference,
    referenced_step,
)

OUTPUT = {
    "images": [{"url": "https://cdn.mock/0.png"}, {"url": "https://cdn.mock/1.png"}],
    "audio_file": {"url": "https://cdn.mock/a.wav", "meta": None},
    "output": "plain text",
}


class TestParseReference:
    def test_keys_and_indices(self) -> None:
        ref = parse_reference("$step1.images[0].url")
        assert ref.step_id == "step1"
        assert ref.path == (Key("images"), Index(0), Key("url"))

    def test_bare_step_reference(self) -> None:
        ref = parse_reference("$step2")
        assert ref.step_id == "step2"
        assert ref.path == ()

    def test_nested_indices(self) -> None:
        assert parse_reference("$s.grid[1][2]").path == (Key("grid"), Index(1), Index(2))

    @pytest.mark.parametrize("value", ["step1.images", "$", "$.images", "$step1.images[x]", "$step1..url", "$step1 url"])
    def test_malformed(self, value: str) -> None:
        with pytest.raises(ReferenceSyntaxError):
            parse_reference(value)


class TestEvaluate:
    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            ("$step1.images[0].url", "https://cdn.mock/0.png"),
            ("$step1.images[1].url", "https://cdn.mock/1.png"),
            ("$step1.audio_file.url", "https://cdn.mock/a.wav"),
            ("$step1.output", "plain text"),
        ],
    )
    def test_resolves(self, reference: str, expected: str) -> None:
        assert evaluate(parse_reference(reference).path, OUTPUT) == expected

    @pytest.mark.parametrize(
        "reference",
        [
            "$step1.images[5].url",
            "$step1.video.url",
            "$step1.audio_file.meta",
            "$step1.output[0]",
            "$step1.images.url",
        ],
    )
    def test_missing(self, reference: str) -> None:
        assert evaluate(parse_reference(reference).path, OUTPUT) is MISSING

    def test_missing_root(self) -> None:
        assert evaluate((Key("x"),), None) is MISSING

    def test_empty_path_returns_root(self) -> None:
        assert evaluate((), OUTPUT) is OUTPUT


def test_referenced_step() -> None:
    assert referenced_step("$step3.video.url") == "step3"
    assert referenced_step("$step3.bad[") == "step3"
    assert referenced_step("https://literal") is None
    assert is_reference("$x") is True
    assert is_reference(3) is False
