"""Scripted completion provider for testing."""

from zhishi.exceptions import RemoteCallError


class ScriptedCompletion:
    """Completion provider that replays queued responses.

    Each queued item is either a string (returned as the completion) or an
    exception instance (raised). Once the queue is empty, `default` is
    used; a default of None raises RemoteCallError.
    """

    config_class = None

    def __init__(
        self,
        responses: list[str | Exception] | None = None,
        default: str | Exception | None = None,
    ) -> None:
        self._responses = list(responses or [])
        self._default = default
        self.prompts: list[str] = []
        self.closed = False

    @classmethod
    async def from_dict(cls, config: dict) -> "ScriptedCompletion":
        return cls(config.get("responses"), config.get("default"))

    def queue(self, *responses: str | Exception) -> None:
        self._responses.extend(responses)

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        item = self._responses.pop(0) if self._responses else self._default
        if item is None:
            raise RemoteCallError("no scripted response", status_code=503)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True
