from household_ledger.domain import recurring
from household_ledger.domain.competency import normalize_competency
from household_ledger.domain.errors import LedgerError
from household_ledger.domain.recurring import ScheduleState, SkipReason
from household_ledger.logger import get_logger
from household_ledger.models import GenerationResult, RecurringTemplate, Transaction
from household_ledger.services.closure import ClosureGate
from household_ledger.storage.base import LedgerStore

logger = get_logger(__name__)

GENERATE_OPERATION = "generate recurring transactions"


class RecurringGenerator:
    def __init__(self, store: LedgerStore, gate: ClosureGate) -> None:
        self.store = store
        self.gate = gate

    def generate(self, competency: str) -> GenerationResult:
        """Materialize every due template into ``competency`` at most once.

        Each template runs in its own unit of work, so one failing template
        never undoes or blocks the others.
        """
        key = normalize_competency(competency)
        self.gate.guard(GENERATE_OPERATION, key)

        result = GenerationResult(competency=key)
        for template in self.store.list_templates():
            try:
                generated, reason = self._generate_one(template, key)
            except LedgerError as exc:
                logger.warning(
                    "[RECURRING] Template %s skipped for %s: %s",
                    template.id,
                    key,
                    exc.message,
                )
                generated, reason = None, exc.code
            except Exception:
                logger.exception("[RECURRING] Template %s failed for %s", template.id, key)
                generated, reason = None, "error"

            if generated is not None:
                result.generated.append(generated)
            else:
                result.skipped.append(template.id)
                result.reasons[template.id] = reason

        logger.info(
            "[RECURRING] Competency %s: generated %d, skipped %d.",
            key,
            len(result.generated),
            len(result.skipped),
        )
        return result

    def _generate_one(
        self, template: RecurringTemplate, competency: str
    ) -> tuple[Transaction | None, str | None]:
        with self.store.unit_of_work():
            existing = self.store.find_materialization(template.id, competency)
            current = recurring.state(template, competency, existing)
            if current == ScheduleState.GENERATED:
                logger.debug(
                    "[RECURRING] Template %s already generated for %s (transaction %s).",
                    template.id,
                    competency,
                    existing.id,
                )
                return None, SkipReason.ALREADY_GENERATED.value
            if current == ScheduleState.NOT_DUE:
                reason = recurring.skip_reason(template, competency)
                return None, reason.value if reason else SkipReason.OUT_OF_WINDOW.value

            self.gate.guard(GENERATE_OPERATION, competency)
            [stored] = self.store.add_transactions([recurring.materialize(template, competency)])

        logger.info(
            "[RECURRING] Template %s materialized as transaction %s on %s (%s).",
            template.id,
            stored.id,
            stored.date.isoformat(),
            competency,
        )
        return stored, None
