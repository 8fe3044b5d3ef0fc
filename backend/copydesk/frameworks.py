import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

BUSINESS_CONTEXT_PLACEHOLDER = "{{businessContext}}"
DEFAULT_FRAMEWORK_ID = "aida"

# (attribute, label) pairs rendered into the business context block, in order.
_PROFILE_FIELDS = (
    ("name", "Business Name"),
    ("industry", "Industry"),
    ("target_audience", "Target Audience"),
    ("unique_value_proposition", "Unique Value Proposition"),
    ("pain_points", "Pain Points"),
    ("brand_voice", "Brand Voice"),
)


class Framework(BaseModel):
    """A named copywriting structure and the system prompt that enforces it."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    sections: tuple[str, ...]
    system_prompt: str

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.description})"


def _template(long_name: str, sections: tuple[str, ...]) -> str:
    if len(sections) > 1:
        headings = ", ".join(sections[:-1]) + f", and {sections[-1]}"
    else:
        headings = sections[0]
    return (
        f"You are a copywriting assistant that specializes in the {long_name} framework.\n"
        f"{BUSINESS_CONTEXT_PLACEHOLDER}\n\n"
        "When responding to user queries, structure your copy in clear sections with "
        f"headings for {headings}, unless the user asks for a different format."
    )


def _framework(id: str, name: str, sections: tuple[str, ...]) -> Framework:
    description = ", ".join(sections)
    return Framework(
        id=id,
        name=name,
        description=description,
        sections=sections,
        system_prompt=_template(f"{name} ({description})", sections),
    )


_FRAMEWORKS: tuple[Framework, ...] = (
    _framework("aida", "AIDA", ("Attention", "Interest", "Desire", "Action")),
    _framework("fab", "FAB", ("Features", "Advantages", "Benefits")),
    _framework("pas", "PAS", ("Problem", "Agitate", "Solution")),
    _framework("bab", "BAB", ("Before", "After", "Bridge")),
    _framework("acca", "ACCA", ("Awareness", "Comprehension", "Conviction", "Action")),
    _framework("4ps", "The 4 Ps", ("Promise", "Picture", "Proof", "Push")),
)

_BY_ID = {framework.id: framework for framework in _FRAMEWORKS}


def all_frameworks() -> list[Framework]:
    return list(_FRAMEWORKS)


def resolve(framework_id: str | None) -> Framework | None:
    """Look up a framework by id, ignoring case."""
    if not framework_id:
        return None
    return _BY_ID.get(framework_id.strip().lower())


def by_name(name: str | None) -> Framework | None:
    """
    Match a framework by its short name ("AIDA"), the part before " (",
    or the full display name ("AIDA (Attention, Interest, Desire, Action)").
    """
    if not name:
        return None
    lowered = name.strip().lower()
    short_name = lowered.split(" (")[0]
    for framework in _FRAMEWORKS:
        candidate = framework.name.lower()
        if candidate in (lowered, short_name) or framework.display_name.lower() == lowered:
            return framework
    return None


def _profile_value(profile: Any, attribute: str) -> Any:
    if isinstance(profile, dict):
        return profile.get(attribute)
    return getattr(profile, attribute, None)


def format_business_context(business_profile: Any) -> str:
    """Render the present profile fields as a newline-joined context block."""
    if not business_profile:
        return ""
    lines = ["Business Context:"]
    for attribute, label in _PROFILE_FIELDS:
        value = _profile_value(business_profile, attribute)
        if value is None or not str(value).strip():
            continue
        lines.append(f"{label}: {str(value).strip()}")
    if len(lines) == 1:
        return ""
    return "\n".join(lines)


def render(framework: Framework, business_profile: Any = None) -> str:
    context = format_business_context(business_profile)
    return framework.system_prompt.replace(
        BUSINESS_CONTEXT_PLACEHOLDER, f"\n{context}" if context else ""
    )


def system_prompt(framework_id: str | None, business_profile: Any = None) -> str:
    framework = resolve(framework_id)
    if framework is None:
        logger.warning('Framework id "%s" not found, defaulting to %s', framework_id, DEFAULT_FRAMEWORK_ID)
        framework = _BY_ID[DEFAULT_FRAMEWORK_ID]
    return render(framework, business_profile)


def legacy_convert(value: str | None) -> str:
    """
    Map a stored framework value to a registry id.

    Older chats stored full labels such as "PAS (Problem, Agitate, Solution)".
    Unknown values fall back to the baseline framework rather than failing.
    """
    if not value or not value.strip():
        return DEFAULT_FRAMEWORK_ID

    lowered = value.strip().lower()
    if lowered in _BY_ID:
        return lowered

    for framework in _FRAMEWORKS:
        if framework.id in lowered:
            return framework.id

    framework = by_name(value)
    if framework is not None:
        return framework.id

    logger.warning('Could not convert framework value "%s", defaulting to %s', value, DEFAULT_FRAMEWORK_ID)
    return DEFAULT_FRAMEWORK_ID


def display_name(framework_id: str | None) -> str:
    if not framework_id:
        return "Unknown Framework"
    framework = resolve(framework_id) or resolve(legacy_convert(framework_id))
    return framework.display_name if framework else framework_id


def mock_response(framework_id: str | None, prompt: str) -> str:
    """Deterministic fallback copy used when the provider is unavailable."""
    framework = resolve(framework_id) or _BY_ID[DEFAULT_FRAMEWORK_ID]
    sections = []
    for index, heading in enumerate(framework.sections):
        if index == 0:
            body = f'This is a fallback response for "{prompt}" because the copy service is unavailable.'
        elif index == len(framework.sections) - 1:
            body = "Try again in a moment to get AI-generated copy for this section."
        else:
            body = f"This section would develop the {heading.lower()} part of your {framework.name} copy."
        sections.append(f"# {heading}\n{body}")
    return "\n\n".join(sections)
