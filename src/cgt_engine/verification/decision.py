"""Decision mode selection from the conflict score and evidence authority."""

from __future__ import annotations

from cgt_engine.config.constants import NLI_WEIGHT, RULE_WEIGHT
from cgt_engine.config.policy import DomainPolicy
from cgt_engine.models.domain import DecisionMode, EvidencePack


def combine_conflict_scores(nli_score: float, rule_score: float) -> float:
    return max(0.0, min(1.0, NLI_WEIGHT * nli_score + RULE_WEIGHT * rule_score))


def has_authoritative_evidence(evidence_pack: EvidencePack, policy: DomainPolicy) -> bool:
    return any(policy.is_authoritative(e.domain) for e in evidence_pack.evidence)


def decide_mode(conflict_score: float, evidence_pack: EvidencePack, policy: DomainPolicy) -> DecisionMode:
    if conflict_score < policy.conflict_threshold:
        return DecisionMode.GPT_DRAFT
    if has_authoritative_evidence(evidence_pack, policy):
        return DecisionMode.WEB_OVERRIDE
    return DecisionMode.HYBRID
