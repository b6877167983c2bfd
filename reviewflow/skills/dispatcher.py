"""
ReviewFlow - Skill dispatcher.

Single entrypoint for skill invocation. Chooses a transport, records a
``SkillInvocation`` for every call that reached a transport and returns
the skill output.

Transport precedence:

1. remote skills disabled in config -> local (kill switch)
2. ``features["remote_skills"] is True`` on the call -> remote
3. otherwise -> local
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from ..config import SkillTransportConfig
from ..exceptions import SkillExecutionError, SkillNotFoundError
from ..models import TransportKind
from .base import SkillInvocation, SkillInvocationContext, TransportResult
from .catalog import SkillCatalog
from .transports import LocalSkillTransport, RemoteSkillTransport

logger = logging.getLogger("reviewflow.skills")


class SkillDispatcher:
    """
    Invokes catalog skills over the local or remote transport.

    Example:
        ```python
        dispatcher = SkillDispatcher(SkillTransportConfig.from_env())
        trace = []
        output = await dispatcher.invoke(
            "kyc.topic_assemble",
            {"documents": docs},
            SkillInvocationContext(run_id="run-1", trace=trace),
        )
        ```
    """

    def __init__(
        self,
        config: Optional[SkillTransportConfig] = None,
        catalog: Optional[SkillCatalog] = None,
        local: Optional[LocalSkillTransport] = None,
        remote: Optional[RemoteSkillTransport] = None,
    ):
        self.config = config or SkillTransportConfig()
        self.catalog = catalog or SkillCatalog()
        self.local = local or LocalSkillTransport()
        self.remote = remote or RemoteSkillTransport(self.config)

    def select_transport(self, ctx: SkillInvocationContext) -> TransportKind:
        if not self.config.enable_remote_skills:
            return TransportKind.LOCAL
        if ctx.features.get("remote_skills") is True:
            return TransportKind.REMOTE
        return TransportKind.LOCAL

    def _record(
        self,
        ctx: SkillInvocationContext,
        skill_name: str,
        correlation_id: str,
        started_at: str,
        result: TransportResult,
    ) -> SkillInvocation:
        invocation = SkillInvocation(
            id=str(uuid.uuid4()),
            skill_name=skill_name,
            owner_agent=self.catalog.owner_of(skill_name),
            started_at=started_at,
            ended_at=datetime.now(timezone.utc).isoformat(),
            duration_ms=result.duration_ms,
            ok=result.ok,
            input_summary=result.input_summary,
            output_summary=result.output_summary,
            correlation_id=correlation_id,
            transport=result.transport,
            target=result.target,
            error=result.error,
        )
        if ctx.trace is not None:
            ctx.trace.append(invocation)
        logger.info(
            f"{skill_name} completed in {invocation.duration_ms}ms "
            f"(transport={invocation.transport.value}, ok={invocation.ok})"
        )
        return invocation

    async def invoke(
        self,
        skill_name: str,
        input: dict[str, Any],
        ctx: Optional[SkillInvocationContext] = None,
    ) -> Any:
        """
        Invoke ``skill_name`` and return its output.

        Raises:
            SkillNotFoundError: The skill is not in the catalog.
            SkillExecutionError: The local transport failed. The invocation
                is recorded before the error propagates.
        """
        ctx = ctx or SkillInvocationContext()
        if skill_name not in self.catalog:
            raise SkillNotFoundError(skill_name)

        started_at = datetime.now(timezone.utc).isoformat()
        correlation_id = ctx.run_id or str(uuid.uuid4())
        transport = self.select_transport(ctx)

        if transport == TransportKind.REMOTE:
            result = await self.remote.execute(skill_name, input, correlation_id)
        else:
            try:
                result = await self.local.execute(skill_name, input)
            except SkillExecutionError as e:
                logger.error(f"Skill {skill_name} raised: {e.message}")
                if isinstance(e.invocation, TransportResult):
                    e.invocation = self._record(ctx, skill_name, correlation_id, started_at, e.invocation)
                raise

        self._record(ctx, skill_name, correlation_id, started_at, result)
        return result.output
