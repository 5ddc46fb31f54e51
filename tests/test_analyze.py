"""Tests for the read-only tagging check."""

from deck_variants.analyze import check_presentation, get_check_json, is_splittable
from deck_variants.config import AmbiguityPolicy, SplitConfig

from conftest import TAG_A, TAG_B, TAG_BOTH, deck_texts


def test_check_presentation_reports_every_slide(host, deck_factory):
    master = deck_factory([[TAG_A], [TAG_B], [TAG_BOTH], [], [TAG_A, TAG_B]])
    before = deck_texts(master)

    slides = check_presentation(host, master, SplitConfig(), verbose=False)

    assert [s['num'] for s in slides] == [1, 2, 3, 4, 5]
    assert [s['outcome'] for s in slides] == ['a', 'b', 'both', 'missing', 'multiple']
    assert slides[2]['variants'] == ['a', 'b']
    assert slides[4]['labels'] == [TAG_A, TAG_B]
    assert slides[0]['title'] == "Slide 1"
    assert deck_texts(master) == before


def test_check_presentation_verbose_output(host, deck_factory, capsys):
    master = deck_factory([[TAG_A], []])
    check_presentation(host, master, SplitConfig(), verbose=True)
    out = capsys.readouterr().out
    assert "NO TAG (1 slides)" in out
    assert "Slide 2" in out
    assert "Fix the slides above" in out


def test_get_check_json(host, deck_factory):
    master = deck_factory([[TAG_A], [TAG_B], [TAG_BOTH], [TAG_A, TAG_B]])
    config = SplitConfig()
    slides = check_presentation(host, master, config, verbose=False)

    result = get_check_json(slides, config)
    assert result['total_slides'] == 4
    assert result['variants']['a']['slides'] == [1, 3]
    assert result['variants']['b']['slides'] == [2, 3]
    assert result['variants']['a']['label'] == TAG_A
    assert result['missing_tag'] == []
    assert result['multiple_tags'] == [4]
    assert result['splittable'] is False


def test_is_splittable_depends_on_policy():
    clean = [{'outcome': 'a'}, {'outcome': 'both'}]
    ambiguous = clean + [{'outcome': 'multiple'}]
    missing = clean + [{'outcome': 'missing'}]

    assert is_splittable(clean, AmbiguityPolicy.STRICT)
    assert not is_splittable(ambiguous, AmbiguityPolicy.STRICT)
    assert is_splittable(ambiguous, AmbiguityPolicy.PERMISSIVE)
    assert not is_splittable(missing, AmbiguityPolicy.PERMISSIVE)
