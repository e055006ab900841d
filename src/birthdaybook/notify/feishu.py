"""Feishu (Lark) notification sink.

Sends reminders as text messages to one chat via the Feishu API.
Requires: pip install 'birthdaybook[feishu]'
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from birthdaybook.errors import SinkUnavailable
from birthdaybook.notify.base import Notification

if TYPE_CHECKING:
    from birthdaybook.config import FeishuConfig

logger = logging.getLogger(__name__)


class FeishuSink:
    """Feishu chat sink using the lark-oapi SDK."""

    def __init__(self, config: FeishuConfig) -> None:
        self._config = config
        try:
            import lark_oapi as lark
        except ImportError:
            raise ImportError(
                "lark-oapi package required. Install with: pip install 'birthdaybook[feishu]'"
            )
        self._client = (
            lark.Client.builder().app_id(config.app_id).app_secret(config.app_secret).build()
        )

    @property
    def name(self) -> str:
        return "feishu"

    def send(self, notification: Notification) -> None:
        """Post ``title\\nbody`` to the configured chat. Images are not uploaded."""
        if not self._config.chat_id:
            raise SinkUnavailable(self.name, "no chat_id configured")

        from lark_oapi.api.im.v1 import CreateMessageRequest, CreateMessageRequestBody

        content = json.dumps(
            {"text": f"{notification.title}\n{notification.body}"}, ensure_ascii=False
        )
        req = (
            CreateMessageRequest.builder()
            .receive_id_type("chat_id")
            .request_body(
                CreateMessageRequestBody.builder()
                .receive_id(self._config.chat_id)
                .msg_type("text")
                .content(content)
                .build()
            )
            .build()
        )

        try:
            resp = self._client.im.v1.message.create(req)
        except Exception as e:
            raise SinkUnavailable(self.name, str(e)) from e
        if not resp.success():
            raise SinkUnavailable(self.name, f"code={resp.code} msg={resp.msg}")
        logger.debug("Feishu message sent: %s", notification.title)
