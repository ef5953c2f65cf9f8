from pathlib import Path

import pytest

from autop import Options, auto_p
from autop.engine.adapter import ENGINE_NAMES

DATA_DIR = Path(__file__).parent / "data"
FIXTURES = sorted(DATA_DIR.glob("*.test.html"))


def _expected_path(source: Path) -> Path:
    return source.with_name(source.name[: -len(".test.html")] + ".autoped.html")


def test_fixtures_are_paired():
    assert FIXTURES
    for source in FIXTURES:
        assert _expected_path(source).exists(), source.name


@pytest.mark.parametrize("engine", ENGINE_NAMES)
@pytest.mark.parametrize("source", FIXTURES, ids=lambda p: p.name)
def test_fixture_output_matches(source, engine):
    html = source.read_text(encoding="utf-8")
    expected = _expected_path(source).read_text(encoding="utf-8").strip()
    assert auto_p(html, Options(br=True, esc_pre=True), engine=engine) == expected
