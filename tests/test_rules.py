import json

import pytest

from breathe.config import OrganizeRule
from breathe.rules import FilePlan, Plan, RuleMatcher, expand_braces


def test_matches_pdf():
    m = RuleMatcher([OrganizeRule("*.pdf", "~/Documents"), OrganizeRule("*", "~/Unsorted")])
    assert m.match("report.pdf") == "~/Documents"


def test_falls_back_to_default():
    m = RuleMatcher([OrganizeRule("*.pdf", "~/Documents"), OrganizeRule("*", "~/Unsorted")])
    assert m.match("random.xyz") == "~/Unsorted"


@pytest.mark.parametrize("name", ["photo.jpg", "image.png", "anim.gif"])
def test_brace_expansion(name):
    m = RuleMatcher([OrganizeRule("*.{jpg,png,gif}", "~/Pictures")])
    assert m.match(name) == "~/Pictures"


def test_no_rule_matches():
    m = RuleMatcher([OrganizeRule("*.pdf", "~/Documents")])
    assert m.match("song.mp3") == ""


def test_invalid_rule_is_skipped():
    m = RuleMatcher([OrganizeRule("[bad", "~/Bad"), OrganizeRule("*", "~/Unsorted")])
    assert m.match("file.txt") == "~/Unsorted"


def test_expand_braces_single():
    assert expand_braces("*.txt") == ["*.txt"]


def test_expand_braces_multiple():
    assert expand_braces("*.{a,b,c}") == ["*.a", "*.b", "*.c"]


def test_expand_braces_two_groups():
    assert expand_braces("a{b,c}d{e,f}") == ["abde", "abdf", "acde", "acdf"]


def test_expand_braces_unclosed_left_alone():
    assert expand_braces("*.{a,b") == ["*.{a,b"]


@pytest.fixture
def downloads(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    src = tmp_path / "dl"
    src.mkdir()
    (src / "report.pdf").write_bytes(b"pdfdata")
    (src / "photo.jpg").write_bytes(b"jpg")
    (src / "subdir").mkdir()
    return home, src


def test_create_plan(downloads):
    home, src = downloads
    m = RuleMatcher(
        [OrganizeRule("*.pdf", "~/Documents"), OrganizeRule("*.jpg", "~/Pictures")]
    )
    plan = m.create_plan(str(src))
    assert [fp.source for fp in plan.files] == [str(src / "photo.jpg"), str(src / "report.pdf")]
    pdf = plan.files[1]
    assert pdf.dest == str(home / "Documents" / "report.pdf")
    assert pdf.size == len(b"pdfdata")
    assert set(plan.by_dest) == {str(home / "Documents"), str(home / "Pictures")}
    assert plan.by_dest[str(home / "Documents")] == [pdf]


def test_create_plan_skips_unmatched_and_dirs(downloads):
    _, src = downloads
    plan = RuleMatcher([OrganizeRule("*.pdf", "/archive")]).create_plan(str(src))
    assert [fp.dest for fp in plan.files] == ["/archive/report.pdf"]


def test_create_plan_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        RuleMatcher([]).create_plan(str(tmp_path / "missing"))


def test_plan_to_dict_round_trip():
    fp = FilePlan("/a/x.pdf", "/docs/x.pdf", 7)
    plan = Plan(files=[fp], by_dest={"/docs": [fp]})
    data = json.loads(json.dumps(plan.to_dict()))
    assert data["files"] == [{"source": "/a/x.pdf", "dest": "/docs/x.pdf", "size": 7}]
    assert data["by_dest"]["/docs"] == data["files"]