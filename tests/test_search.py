from pathlib import Path

from gars.search import SearchOptions, SkillHit, rank, search_local, tokenize
from gars.skill import SkillIndex


def make(key, body="", **fields):
    return SkillIndex(key=key, name=key, path=Path(f"/s/{key}.md"), body_preview=body, **fields)


def test_ranks_keyword_in_key_first(tmp_path):
    (tmp_path / "plan.md").write_text(
        "---\nkey: plan\nname: Plan SOP\ntags: [plan]\n---\nplan body\n", encoding="utf-8"
    )
    (tmp_path / "misc.md").write_text(
        "---\nkey: misc\nname: Misc\n---\nthis mentions plan once\n", encoding="utf-8"
    )
    hits = search_local("plan", tmp_path, SearchOptions())
    assert hits
    assert hits[0].skill.key == "plan"


def test_tokenize_words():
    assert tokenize("Hello, World 42") == ["hello", "world", "42"]
    assert tokenize("") == []


def test_tokenize_cjk_characters_stand_alone():
    assert tokenize("中文") == ["中", "文"]


def test_empty_query_returns_nothing():
    assert rank([make("plan", "plan")], "  ,, ") == []


def test_no_match_returns_nothing():
    assert rank([make("plan", "plan body")], "zebra") == []


def test_scores_are_sorted_and_positive():
    skills = [make("alpha", "deploy"), make("deploy", "deploy deploy"), make("gamma", "other")]
    hits = rank(skills, "deploy")
    scores = [hit.score for hit in hits]
    assert scores == sorted(scores, reverse=True)
    assert all(score > 0 for score in scores)
    assert {hit.skill.key for hit in hits} == {"alpha", "deploy"}
    assert hits[0].skill.key == "deploy"


def test_top_k_limits_results():
    skills = [make(f"s{n}", "shared") for n in range(5)]
    assert len(rank(skills, "shared", SearchOptions(top_k=2))) == 2
    assert len(rank(skills, "shared", SearchOptions())) == 5


def test_category_filter_ignores_ascii_case():
    skills = [make("a", "shared", category="Workflow"), make("b", "shared", category="misc")]
    hits = rank(skills, "shared", SearchOptions(category="workflow"))
    assert [hit.skill.key for hit in hits] == ["a"]


def test_autonomous_only_filter():
    skills = [make("a", "shared", autonomous_safe=True), make("b", "shared")]
    hits = rank(skills, "shared", SearchOptions(autonomous_only=True))
    assert [hit.skill.key for hit in hits] == ["a"]
    assert isinstance(hits[0], SkillHit) and hits[0].score > 0


def test_tag_match_adds_to_score():
    tagged = make("a", "word", tags=["word"])
    plain = make("b", "word")
    plain.tags = ["zzz"]
    hits = {hit.skill.key: hit.score for hit in rank([tagged, plain], "word")}
    assert hits["a"] > hits["b"]