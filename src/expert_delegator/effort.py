"""
Reasoning-effort classification from task text.

Precedence is explicit override, then xhigh triggers, then high triggers,
then the policy default. Within a tier the first trigger in list order wins.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .models import AUTO_EFFORT, EffortDecision, EffortSource, EffortTier

logger = logging.getLogger(__name__)

# Large blast-radius work
DEFAULT_XHIGH_TRIGGERS: tuple[str, ...] = (
	"大規模リファクタリング", "リファクタリング", "refactor", "refactoring",
	"アーキテクチャ変更", "アーキテクチャ再設計", "architecture",
	"マイグレーション", "migration", "移行",
	"全体設計", "システム再設計", "redesign", "システム刷新",
	"パフォーマンス最適化", "performance optimization",
	"セキュリティ監査", "security audit", "脆弱性診断",
	"大規模", "large-scale", "全面改修",
)

# Medium-sized or multi-file work
DEFAULT_HIGH_TRIGGERS: tuple[str, ...] = (
	"設計レビュー", "コードレビュー", "PRレビュー", "review",
	"複雑", "complex", "複数ファイル", "multi-file",
	"テスト追加", "テスト拡充", "カバレッジ向上",
	"API設計", "DB設計", "スキーマ変更",
)


@dataclass(frozen=True)
class EffortPolicy:
	"""Keyword lists and fallback tier used for classification."""
	xhigh_triggers: tuple[str, ...] = DEFAULT_XHIGH_TRIGGERS
	high_triggers: tuple[str, ...] = DEFAULT_HIGH_TRIGGERS
	default_tier: EffortTier = EffortTier.MEDIUM


class EffortClassifier:
	"""Maps task text to an EffortDecision."""

	def __init__(self, policy: Optional[EffortPolicy] = None):
		self.policy = policy or EffortPolicy()

	def classify(self, task_text: str, explicit_override: Optional[str] = None) -> EffortDecision:
		"""Resolve the effort tier for a task."""
		override = _parse_override(explicit_override)
		if override is not None:
			return EffortDecision(tier=override, source=EffortSource.CLI)

		tier, trigger = self._match(task_text)
		if tier is not None:
			logger.info(f"Matched trigger '{trigger}' -> effort '{tier.value}' for task: {task_text[:80]}")
			return EffortDecision(tier=tier, source=EffortSource.AUTO_DETECTED)

		return EffortDecision(tier=self.policy.default_tier, source=EffortSource.DEFAULT)

	def matched_trigger(self, task_text: str) -> Optional[str]:
		"""Return the trigger that auto-detection would match, if any."""
		return self._match(task_text)[1]

	def _match(self, task_text: str) -> tuple[Optional[EffortTier], Optional[str]]:
		task_lower = (task_text or "").lower()
		if not task_lower:
			return None, None

		for tier, triggers in (
			(EffortTier.XHIGH, self.policy.xhigh_triggers),
			(EffortTier.HIGH, self.policy.high_triggers),
		):
			for trigger in triggers:
				if trigger.lower() in task_lower:
					return tier, trigger
		return None, None


def _parse_override(value: Optional[str]) -> Optional[EffortTier]:
	if not value or value == AUTO_EFFORT:
		return None
	try:
		return EffortTier(value)
	except ValueError:
		logger.warning(f"Ignoring unknown effort override '{value}', classifying from task")
		return None
