"""Combines the heuristic and inference passes into one conflict analysis."""

from __future__ import annotations

from cgt_engine.config.policy import DomainPolicy
from cgt_engine.models.domain import ConflictAnalysis, EvidencePack
from cgt_engine.observability.logger import get_logger
from cgt_engine.verification.decision import combine_conflict_scores, decide_mode
from cgt_engine.verification.heuristics import analyze_rules
from cgt_engine.verification.nli import NLIConflictJudge

logger = get_logger("conflict_resolver")


class ConflictResolver:
    def __init__(self, judge: NLIConflictJudge, policy: DomainPolicy) -> None:
        self._judge = judge
        self._policy = policy

    async def resolve(
        self,
        draft_with_evidence: str,
        draft_without_evidence: str,
        evidence_pack: EvidencePack,
    ) -> ConflictAnalysis:
        rules = analyze_rules(draft_with_evidence, draft_without_evidence, evidence_pack.evidence)
        nli, tokens = await self._judge.judge(
            draft_with_evidence, draft_without_evidence, evidence_pack
        )
        score = combine_conflict_scores(nli.conflict_score, rules.rule_score)
        mode = decide_mode(score, evidence_pack, self._policy)
        analysis = ConflictAnalysis(
            conflict_score=score,
            conflicts=rules.conflicts + [c for c in nli.conflicts if c not in rules.conflicts],
            decisive_web_sources=nli.decisive_web_sources,
            decision_mode=mode,
            rule_score=rules.rule_score,
            nli_score=nli.conflict_score,
            reasoning=nli.reasoning,
            tokens_used=tokens,
        )
        logger.info(
            "conflict_resolved",
            conflict_score=round(score, 4),
            rule_score=rules.rule_score,
            nli_score=nli.conflict_score,
            decision_mode=str(mode),
        )
        return analysis
