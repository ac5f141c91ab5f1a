"""Tests for answer section splitting."""

from cgt_engine.answer.sections import match_heading, render_sections, split_sections

ANSWER = """1. 개요/기본 원칙
1세대 1주택은 비과세됩니다.

2. 보유·거주기간/세율 표
2년 이상 보유 시 비과세.

3. 실무상 유의사항
고가주택은 12억원 초과분 과세.

4. 관련 법령 및 근거
소득세법 제89조.

5. 결론
요건 충족 시 비과세."""


def test_splits_canonical_headings():
    sections = split_sections(ANSWER)
    assert sections.overview == "1세대 1주택은 비과세됩니다."
    assert sections.tax_rates == "2년 이상 보유 시 비과세."
    assert sections.considerations == "고가주택은 12억원 초과분 과세."
    assert sections.legal_basis == "소득세법 제89조."
    assert sections.conclusion == "요건 충족 시 비과세."


def test_markdown_heading_variants():
    assert match_heading("## 1. 개요") == ("overview", "")
    assert match_heading("**3. 실무상 유의사항**") == ("considerations", "")
    assert match_heading("5. 결론: 비과세 대상입니다") == ("conclusion", "비과세 대상입니다")
    assert match_heading("2. 세율 표") == ("tax_rates", "")
    assert match_heading("일반 문장입니다") is None


def test_text_before_headings_goes_to_overview():
    sections = split_sections("서론 문장\n5. 결론\n끝")
    assert sections.overview == "서론 문장"
    assert sections.conclusion == "끝"
    assert sections.tax_rates == ""


def test_unstructured_text_is_all_overview():
    sections = split_sections("헤딩 없는 답변입니다.\n두 번째 줄.")
    assert sections.overview == "헤딩 없는 답변입니다.\n두 번째 줄."
    assert sections.legal_basis == ""


def test_render_then_split_is_stable():
    sections = split_sections(ANSWER)
    assert split_sections(render_sections(sections)) == sections
