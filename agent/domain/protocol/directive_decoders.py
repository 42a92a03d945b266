"""Decoders for the reserved directive tags.

``thinking``, ``ask_followup_question`` and ``attempt_completion`` are the
only tag names the engine interprets itself; every other tag is looked up in
the tool registry.
"""
from domain.models.protocol import CompletionDirective, FollowupQuestion
from domain.protocol.tag_extractor import find_all_tags, find_tag, find_tag_match

THINKING_TAG = "thinking"
FOLLOWUP_QUESTION_TAG = "ask_followup_question"
COMPLETION_TAG = "attempt_completion"

RESERVED_TAGS = frozenset({THINKING_TAG, FOLLOWUP_QUESTION_TAG, COMPLETION_TAG})

_RESULT_OPEN = "<result>"
_RESULT_CLOSE = "</result>"


def decode_thought(content: str) -> str:
    return content.strip()


def decode_followup_question(content: str) -> FollowupQuestion:
    """Decode the body of an ``ask_followup_question`` directive.

    Missing or empty ``question`` / ``follow_up`` wrappers give an empty
    question or no options rather than an error. Blank suggestions are
    dropped.
    """
    question = (find_tag(content, "question") or "").strip()

    options = []
    follow_up = find_tag(content, "follow_up")
    if follow_up:
        for suggestion in find_all_tags(follow_up, "suggest"):
            option = suggestion.strip()
            if option:
                options.append(option)

    return FollowupQuestion(question=question, options=options)


def decode_completion(content: str) -> CompletionDirective:
    """Decode the body of an ``attempt_completion`` directive.

    The ``command`` element is cut out of the remaining text so it is not
    repeated in the result. A single ``result`` element wrapping the whole
    remainder is unwrapped; otherwise the remainder is the result.
    """
    result = content.strip()
    command = None

    command_match = find_tag_match(result, "command")
    if command_match:
        command = command_match.group(1).strip() or None
        result = (result[:command_match.start()] + result[command_match.end():]).strip()

    if result.startswith(_RESULT_OPEN) and result.endswith(_RESULT_CLOSE):
        inner = result[len(_RESULT_OPEN):len(result) - len(_RESULT_CLOSE)]
        if _RESULT_OPEN not in inner and _RESULT_CLOSE not in inner:
            result = inner.strip()

    return CompletionDirective(result=result, command=command)
