"""Slack incoming-webhook notification middleware.

Manifesto:
    Whoever owns a scheduled job wants to hear about it when it fails,
    and sometimes when it succeeds. The Slack stage always runs, even
    once an earlier stage stopped the chain, so skipped runs are
    reported too.

Architecture:

    .. code-block:: text

        Slack.run(ctx)
          ├── await ctx.next()          rest of the chain + job body
          ├── ctx.stop(err)             freeze the outcome (first call wins)
          ├── failed or not only_on_error → POST webhook
          │     payload=<json>          form-encoded, like Slack expects
          └── re-raise err

        Attachment per outcome:
          failed  → "Execution failed"     #F35A00 + error (+ logs link)
          skipped → "Execution skipped"    #FFA500
          success → "Execution successful" #7CD197

Tags:
    cronswarm, middlewares, slack, webhook, notifications

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel

if TYPE_CHECKING:
    from cronswarm.core.settings import CronswarmSettings
    from cronswarm.execution.context import Context

SLACK_USERNAME = "cronswarm"
SLACK_PAYLOAD_FIELD = "payload"
INSTANCE_NAME_PLACEHOLDER = "###instance_name###"

COLOR_FAILED = "#F35A00"
COLOR_SKIPPED = "#FFA500"
COLOR_SUCCESS = "#7CD197"


class SlackConfig(BaseModel):
    webhook: str = ""
    only_on_error: bool = False
    logs_url: str = ""

    @classmethod
    def from_settings(cls, settings: CronswarmSettings) -> SlackConfig:
        return cls(
            webhook=settings.slack_webhook,
            only_on_error=settings.slack_only_on_error,
            logs_url=settings.slack_logs_url,
        )


def new_slack(
    config: SlackConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Slack | None:
    """Slack middleware for ``config``, or ``None`` when no webhook is set."""
    if not config.webhook:
        return None
    return Slack(config, transport=transport)


def _instance_suffix(instance_name: str) -> str:
    """Timestamp part of ``<name>_<unix-ts>``."""
    _, sep, suffix = instance_name.partition("_")
    return suffix if sep else instance_name


class Slack:
    """Post the outcome of every run to a Slack incoming webhook."""

    def __init__(
        self,
        config: SlackConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.config = config
        self._transport = transport
        self._timeout = timeout

    def continue_on_stop(self) -> bool:
        return True

    async def run(self, ctx: Context) -> None:
        error: Exception | None = None
        try:
            await ctx.next()
        except Exception as exc:
            error = exc

        ctx.stop(error)

        if ctx.execution.failed or not self.config.only_on_error:
            await self.push_message(ctx)

        if error is not None:
            raise error

    def build_message(self, ctx: Context) -> dict[str, Any]:
        execution = ctx.execution
        text = (
            f"Job *{ctx.job.name}* finished in *{execution.duration}*\n"
            f"```{ctx.job.command}```"
        )

        if execution.failed:
            logs_link = ""
            if self.config.logs_url:
                url = self.config.logs_url.replace(
                    INSTANCE_NAME_PLACEHOLDER, _instance_suffix(ctx.job.instance_name), 1,
                )
                logs_link = f"\n<{url}|show logs>"
            attachment = {
                "title": "Execution failed",
                "text": f"{execution.error}{logs_link}",
                "color": COLOR_FAILED,
            }
        elif execution.skipped:
            attachment = {"title": "Execution skipped", "text": "", "color": COLOR_SKIPPED}
        else:
            attachment = {"title": "Execution successful", "text": "", "color": COLOR_SUCCESS}

        return {
            "text": text,
            "username": SLACK_USERNAME,
            "attachments": [attachment],
            "icon_url": "",
        }

    async def push_message(self, ctx: Context) -> None:
        form = {SLACK_PAYLOAD_FIELD: json.dumps(self.build_message(ctx))}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(self.config.webhook, data=form)
        except httpx.HTTPError as exc:
            ctx.logger.error("slack_post_failed", webhook=self.config.webhook, error=str(exc))
            return

        if response.status_code != 200:
            ctx.logger.error(
                "slack_post_failed",
                webhook=self.config.webhook,
                status_code=response.status_code,
            )
