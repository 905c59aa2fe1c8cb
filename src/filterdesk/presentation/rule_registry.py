"""Local registry of white-traffic filter rules.

The registry holds the console's copy of the rules in the order the server
returned them, the draft behind the "new rule" form, and at most one open
edit session. Every mutation goes to the server first; the local collection
only changes once the server has confirmed, so the identifier set always
matches what the server last acknowledged.
"""

from typing import Any

from ..domain.models import (
    RULE_DRAFT_FIELDS,
    ClientValidationError,
    ErrorCode,
    FilterDeskError,
    Outcome,
    Rule,
    RuleDraft,
    RuleEditSession,
    RuleId,
    TestOutcome,
)
from ..infrastructure.api_gateway import ApiGateway
from .base import ViewStore

LOAD_FAILED = "Failed to load rules, please retry"
CREATE_FAILED = "Failed to add rule, please retry"
UPDATE_FAILED = "Failed to update rule, please retry"
DELETE_FAILED = "Failed to delete rule, please retry"
TEST_FAILED = "Failed to test rule, please retry"


def _not_found(rule_id: RuleId) -> FilterDeskError:
    return FilterDeskError(
        code=ErrorCode.NOT_FOUND,
        message=f"Rule {rule_id} is not in the local registry",
        user_message="Rule not found, please reload the rule list",
        context={"rule_id": rule_id},
    )


class RuleRegistry(ViewStore):
    """Rules view store."""

    component = "rule_registry"

    def __init__(self, gateway: ApiGateway) -> None:
        super().__init__()
        self.gateway = gateway
        self._rules: list[Rule] = []
        self.new_draft = RuleDraft()
        self.edit_session: RuleEditSession | None = None
        self.loading = False

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    def list(self) -> tuple[Rule, ...]:
        """Current rules in server order."""
        return self.rules

    def get(self, rule_id: RuleId) -> Rule | None:
        return next((rule for rule in self._rules if rule.id == rule_id), None)

    def _index_of(self, rule_id: RuleId) -> int | None:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                return index
        return None

    async def load(self) -> Outcome[tuple[Rule, ...]]:
        """Fetch the full rule list, replacing the local copy."""
        self.loading = True
        try:
            rules = await self.gateway.rules.list()
        except Exception as e:
            return self._fail(e, "load", LOAD_FAILED)
        finally:
            self.loading = False

        self._rules = list(rules)
        self.logger.debug("Rules loaded", count=len(self._rules))
        return self._succeed(self.rules)

    async def create(self, draft: RuleDraft | None = None) -> Outcome[Rule]:
        """Create a rule from ``draft`` (the new-rule form by default).

        The draft is kept on failure so the user can correct and resubmit.
        """
        draft = draft if draft is not None else self.new_draft
        try:
            if not draft.is_new:
                raise ClientValidationError(
                    "Draft belongs to an existing rule",
                    context={"target_id": draft.target_id},
                )
            draft.validate_required()
            rule = await self.gateway.rules.create(draft.to_payload())
        except Exception as e:
            return self._fail(e, "create", CREATE_FAILED, rule_name=draft.name)

        index = self._index_of(rule.id) if rule.id is not None else None
        if index is None:
            self._rules.append(rule)
        else:
            self._rules[index] = rule
        if draft is self.new_draft:
            self.reset_new_draft()

        self.logger.info("Rule created", rule_id=rule.id, rule_name=rule.name)
        return self._succeed(rule)

    def begin_edit(self, rule_id: RuleId) -> Outcome[RuleEditSession]:
        """Open an edit session for a rule.

        An unsaved edit of another rule is discarded without asking.
        """
        rule = self.get(rule_id)
        if rule is None:
            return self._fail(_not_found(rule_id), "begin_edit", UPDATE_FAILED)

        if self.edit_session is not None and self.edit_session.target_rule_id != rule_id:
            self.logger.debug(
                "Discarding unsaved edit",
                discarded_rule_id=self.edit_session.target_rule_id,
                rule_id=rule_id,
            )

        self.edit_session = RuleEditSession(
            target_rule_id=rule_id, draft=RuleDraft.from_rule(rule)
        )
        return Outcome.success(self.edit_session)

    def update_field(
        self, target: RuleEditSession | RuleDraft, field: str, value: Any
    ) -> Outcome[RuleDraft]:
        """Change one field of a draft. Local only."""
        draft = target.draft if isinstance(target, RuleEditSession) else target
        try:
            if field not in RULE_DRAFT_FIELDS:
                raise ClientValidationError(
                    f"Unknown rule field '{field}'", context={"field": field}
                )
            setattr(draft, field, value)
        except ClientValidationError as e:
            return self._fail(e, "update_field", UPDATE_FAILED)
        except ValueError as e:
            return self._fail(
                ClientValidationError(
                    f"Invalid value for '{field}'", context={"detail": str(e)}
                ),
                "update_field",
                UPDATE_FAILED,
            )
        return Outcome.success(draft)

    async def commit_edit(
        self, session: RuleEditSession | None = None
    ) -> Outcome[Rule]:
        """Save the open edit session as a whole-record replace.

        On failure the session stays open so the user can retry.
        """
        session = session if session is not None else self.edit_session
        try:
            if session is None or session is not self.edit_session:
                raise ClientValidationError("This edit is no longer open")
            session.draft.validate_required()
            rule = await self.gateway.rules.update(
                session.target_rule_id, session.draft.to_payload()
            )
        except Exception as e:
            return self._fail(
                e,
                "commit_edit",
                UPDATE_FAILED,
                rule_id=session.target_rule_id if session else None,
            )

        index = self._index_of(session.target_rule_id)
        if index is not None:
            self._rules[index] = rule
        if self.edit_session is session:
            self.edit_session = None

        self.logger.info("Rule updated", rule_id=session.target_rule_id)
        return self._succeed(rule)

    def cancel_edit(self, session: RuleEditSession | None = None) -> None:
        """Close the edit session, discarding the draft."""
        if session is None or session is self.edit_session:
            self.edit_session = None

    def reset_new_draft(self) -> None:
        self.new_draft = RuleDraft()

    async def remove(self, rule_id: RuleId) -> Outcome[None]:
        """Delete a rule. Confirmation is the caller's concern."""
        try:
            await self.gateway.rules.delete(rule_id)
        except Exception as e:
            return self._fail(e, "remove", DELETE_FAILED, rule_id=rule_id)

        self._rules = [rule for rule in self._rules if rule.id != rule_id]
        if self.edit_session is not None and self.edit_session.target_rule_id == rule_id:
            self.edit_session = None

        self.logger.info("Rule deleted", rule_id=rule_id)
        return self._succeed()

    async def test(self, rule_id: RuleId) -> Outcome[TestOutcome]:
        """Ask the backend to test a rule; local state is not touched."""
        try:
            message = await self.gateway.rules.test(rule_id)
        except Exception as e:
            return self._fail(e, "test", TEST_FAILED, rule_id=rule_id)
        return self._succeed(TestOutcome(rule_id=rule_id, message=message))
