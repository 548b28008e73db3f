from types import SimpleNamespace

import pytest

from vlga.candidate import Candidate
from vlga.evaluation import (
    ALL_RULES, Rule, has_cadential_ending, improper_cadence_defects,
    improper_outer_voice_count, improper_seventh_resolution, is_melodic_feasible,
    leading_tone_defects, matches_cadence, melodic_infeasibility_count, non_triad_start_defects,
    parse_rules, rule_report, successive_dissonance_defects, voice_independence_check,
)
from vlga.music_constants import ChordQuality

T = ChordQuality.ROOT_TRIAD
t = ChordQuality.INVERTED_TRIAD
S = ChordQuality.ROOT_SEVENTH
s = ChordQuality.INVERTED_SEVENTH
X = ChordQuality.NON_CHORD


def _qualities(*qualities):
    return SimpleNamespace(qualities=tuple(qualities))


def test_rule_weights():
    assert [rule.weight for rule in ALL_RULES] == [0.01, 0.035, 0.25, 0.05, 0.015, 0.02, 0.03, 0.06]


def test_rule_lookup_by_name():
    assert Rule.from_name("voice-independence") is Rule.VOICE_INDEPENDENCE
    assert Rule.from_name("VoiceIndependence") is Rule.VOICE_INDEPENDENCE
    assert Rule.from_name("IMPROPER_CADENTIAL_FORM") is Rule.IMPROPER_CADENTIAL_FORM
    assert parse_rules(["melodic_smoothness", "start-with-non-triad"]) == (
        Rule.MELODIC_SMOOTHNESS, Rule.START_WITH_NON_TRIAD)
    with pytest.raises(ValueError):
        Rule.from_name("parallel-thirds")


@pytest.mark.parametrize("voice, figure, expected", [
    ('S', [18, 26], False),      # ninth
    ('S', [18, 25], True),       # octave
    ('A', [11, 15], False),      # fifth in an inner voice
    ('S', [17, 20], False),      # tritone
    ('T', [7, 9, 11], True),
    ('A', [11, 14, 17], False),  # two fourths span a seventh
    ('S', [18, 21, 25], True),
    ('S', [18, 22, 26], False),
    ('B', [7], True),
])
def test_melodic_feasibility(voice, figure, expected):
    assert is_melodic_feasible(voice, figure) is expected


def test_repeated_notes_are_smooth_in_inner_voices_only():
    assert melodic_infeasibility_count('A', [18, 18, 18]) == 0
    assert melodic_infeasibility_count('S', [18, 18, 18]) == 1


def test_more_skips_than_steps():
    # two skips, one step
    assert melodic_infeasibility_count('T', [7, 9, 10, 12]) == 1


def test_parallel_fifths_and_octaves():
    assert voice_independence_check([7, 8], [11, 12], False) == 1
    assert voice_independence_check([7, 8], [14, 15], False) == 1
    assert voice_independence_check([7, 8], [12, 11], False) == 0


def test_hidden_fifths_only_count_between_outer_voices():
    assert voice_independence_check([7, 8], [10, 12], True) == 1
    assert voice_independence_check([7, 8], [10, 12], False) == 0


def test_tritone_steps_are_not_checked_for_independence():
    # B2 -> F3 is a reduced fifth that would otherwise count as a hidden fifth
    assert voice_independence_check([3, 6], [6, 10], True) == 0
    assert voice_independence_check([3, 6], [6, 10], False) == 0
    # the step after the tritone, C3 -> G3 in parallel, still counts
    assert voice_independence_check([3, 6, 7], [6, 10, 11], False) == 1


def test_outer_voice_placement():
    assert improper_outer_voice_count([22, 20, 15, 4], "SATB") == 0
    assert improper_outer_voice_count([21, 22, 15, 4], "SATB") == 1
    assert improper_outer_voice_count([21, 22, 3, 4], "SATB") == 2


def test_successive_dissonance():
    assert successive_dissonance_defects(_qualities(T, S, T, s, T)) == 0
    assert successive_dissonance_defects(_qualities(S, S, X, T)) == 2
    assert successive_dissonance_defects(_qualities(X)) == 0


def test_non_triad_start():
    assert non_triad_start_defects(_qualities(t, S)) == 0
    assert non_triad_start_defects(_qualities(X, T)) == 1


@pytest.mark.parametrize("letters, expected", [
    (['C', 'B', 'C'], 0),
    (['C', 'B', 'D'], 1),
    (['B', 'B', 'C'], 0),
    (['C', 'B'], 0),
    (['B', 'B'], 1),
    (['B', 'A', 'B'], 1),
])
def test_leading_tone_resolution(letters, expected):
    assert leading_tone_defects(letters) == expected


def test_seventh_resolution(v7_i):
    assert improper_seventh_resolution(v7_i) == 0
    # the seventh F5 moves up to G5
    unresolved = Candidate([24, 20, 15, 4, 25, 21, 14, 7], "SATB")
    assert improper_seventh_resolution(unresolved) == 1


@pytest.mark.parametrize("symbols, expected", [
    (['G', 'C'], True),
    (['g', 'C'], True),
    (['A', 'F', 'C'], True),
    (['C', 'F'], True),
    (['d', 'G'], True),
    (['B', 'C'], False),
    (['X', 'C'], False),
    (['C', 'C'], False),
    (['G', 'B'], False),
    (['C'], False),
])
def test_cadence_patterns(symbols, expected):
    assert matches_cadence(symbols) is expected


def test_cadential_ending():
    assert has_cadential_ending([T, T])
    assert has_cadential_ending([t, S, T])
    assert not has_cadential_ending([T, t])
    assert not has_cadential_ending([s, T])
    assert not has_cadential_ending([T])


def test_cadence_defects(v_i, v7_i):
    assert improper_cadence_defects(v_i) == 0
    assert improper_cadence_defects(v7_i) == 1


def test_rule_report(v_i):
    report = {rule: (count, penalty) for rule, count, penalty in rule_report(v_i)}
    assert report[Rule.MELODIC_SMOOTHNESS] == (2, pytest.approx(0.02))
    assert all(count == 0 for rule, (count, _) in report.items() if rule is not Rule.MELODIC_SMOOTHNESS)
