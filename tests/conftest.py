import json
import threading
from typing import Any, Callable, List, Optional

import pytest

from gigqa.models import JobSpec


class ScriptedClient:
    """Stands in for LLMClient, answering each call with the next canned reply.

    A ``route`` callable, when given, picks the reply from the prompt instead,
    which keeps concurrent agent calls deterministic.
    """

    def __init__(self, replies: Optional[List[Any]] = None, route: Optional[Callable[[str], Any]] = None):
        self.replies = list(replies or [])
        self.route = route
        self.prompts: List[str] = []
        self.images: List[Any] = []
        self.image_prompts: List[str] = []
        self._lock = threading.Lock()

    def complete(self, prompt: str) -> str:
        return self._answer(prompt)

    def complete_with_image(self, prompt: str, image: Any) -> str:
        with self._lock:
            self.images.append(image)
        return self._answer(prompt)

    def generate_image(self, prompt: str) -> bytes:
        self.image_prompts.append(prompt)
        return b"\x89PNG\r\n\x1a\nfake"

    def _answer(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
            reply = self.route(prompt) if self.route else self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def quality_reply(quality: Any, positive=("Clear imagery",), negative=("One line too long",)) -> str:
    return json.dumps({"quality": quality, "positiveFeedback": list(positive), "negativeFeedback": list(negative)})


def quality_master_reply(positive=("Clear imagery",), negative=("One line too long",)) -> str:
    return json.dumps({
        "aggregatedPositiveFeedback": list(positive),
        "aggregatedNegativeFeedback": list(negative),
    })


def review_reply(review: Any, fixable: Any, reassign: Any, considerations=("Reason is vague",)) -> str:
    return json.dumps({
        "reviewScore": review,
        "criticalConsideration": list(considerations),
        "fixableScore": fixable,
        "reassignScore": reassign,
    })


def review_master_reply(considerations=("Reason is vague",)) -> str:
    return json.dumps({"aggregatedCriticalConsideration": list(considerations)})


@pytest.fixture
def poem_job() -> JobSpec:
    return JobSpec(
        title="Poem",
        description="We are looking for a poem that is about the beauty of nature.",
        requirements=["The poem should be about nature", "The poem should be 10 lines long"],
        instructions=["The poem should be in English"],
    )


@pytest.fixture
def ocean_poem() -> str:
    return "\n".join(f"Line {i} of waves that roll upon the shore" for i in range(1, 11))
