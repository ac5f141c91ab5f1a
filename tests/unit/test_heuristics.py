"""Tests for pattern-based conflict detection."""

import pytest

from cgt_engine.verification.heuristics import (
    analyze_rules,
    detect_evidence_omissions,
    detect_legal_conflicts,
    detect_numeric_conflicts,
    extract_articles,
    extract_effective_dates,
    extract_percentages,
    extract_periods,
)

from conftest import make_item


class TestExtractors:
    def test_percentages(self):
        assert extract_percentages("세율은 6% 또는 45 %, 경우에 따라 1.5%") == {"6%", "45%", "1.5%"}

    def test_periods_ignore_dates(self):
        text = "2024년 1월 1일부터 2년 이상 보유, 6개월 이내 신고"
        assert extract_periods(text) == {"2년", "6개월"}

    def test_articles(self):
        assert extract_articles("소득세법 제89조 및 제 95 조, 제104조의2") == {"제89조", "제95조", "제104조의2"}

    def test_effective_dates(self):
        text = "2024년 1월 1일 시행, 2025-01-01 개정"
        assert extract_effective_dates(text) == {"2024년1월1일", "2025-01-01"}


def test_holding_period_mismatch_scores_at_least_numeric_weight():
    analysis = analyze_rules("3년 이상 보유", "5년 이상 보유", [])
    assert analysis.rule_score >= 0.3
    assert analysis.numeric_conflicts
    assert "기간 불일치" in analysis.numeric_conflicts[0]


def test_one_sided_mention_is_not_a_conflict():
    assert detect_numeric_conflicts("세율은 6%입니다", "세율은 누진세율입니다") == []


def test_identical_values_agree():
    assert detect_numeric_conflicts("2년 보유 시 6%", "6% 세율, 2년 보유") == []


def test_legal_conflicts():
    found = detect_legal_conflicts("소득세법 제89조에 따라", "소득세법 제95조에 따라")
    assert len(found) == 1
    assert found[0].startswith("조문 불일치")


def test_effective_date_conflict():
    found = detect_legal_conflicts("2024년 1월 1일 시행", "2023년 1월 1일 시행")
    assert any(c.startswith("효력일 불일치") for c in found)


def test_evidence_omissions_per_draft():
    evidence = [make_item("nts.go.kr", 1, title="1주택 비과세 요건")]
    omissions = detect_evidence_omissions("1주택이면 비과세입니다", "보유기간이 중요합니다", evidence)
    assert omissions == ["DraftB 웹증거 핵심 정보 누락: nts.go.kr"]


def test_evidence_without_tax_terms_never_omitted():
    evidence = [make_item("example.com", 5, title="오늘의 날씨")]
    assert detect_evidence_omissions("a", "b", evidence) == []


def test_all_categories_clip_to_one():
    evidence = [make_item("nts.go.kr", 1, title="장기보유특별공제")]
    analysis = analyze_rules(
        "세율 6%, 2년 보유, 제89조, 2024년 1월 1일",
        "세율 45%, 3년 보유, 제95조, 2023년 1월 1일",
        evidence,
    )
    assert analysis.rule_score == pytest.approx(0.9)
    assert len(analysis.conflicts) == 6


def test_no_conflicts():
    analysis = analyze_rules("같은 내용", "같은 내용", [])
    assert analysis.rule_score == 0.0
    assert analysis.conflicts == []
