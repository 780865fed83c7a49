"""
Email Composer Module

Builds the subject line and body of an application email from fixed template
fragments. The fragment used for the skills paragraph depends on the field
detected in the job description, and every line that needs a profile value is
left out when that value is empty.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..profile import Profile

DEFAULT_ROLE = "UI/UX Designer"
DEFAULT_FIELD = "your organization"

ROLE_PATTERN = re.compile(
    r"(?:position|role|job|opening)[\s:]+(.{10,50}?)(?:\.|,|at|in|\n)",
    re.IGNORECASE
)
ROLE_WORDS = re.compile(r"position|role|job|opening", re.IGNORECASE)

# Checked in order; the first vocabulary with a hit names the field
FIELD_VOCABULARIES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("software", "developer", "engineer"), "software development"),
    (("design", "ui", "ux"), "design"),
    (("marketing", "digital marketing"), "marketing"),
    (("data", "analyst"), "data analytics"),
    (("sales",), "sales"),
)

GREETING = "Dear Hiring Team,"

DEFAULT_BIO = "creative professional with a passion for building intuitive, user-friendly solutions"

OPENING_TEMPLATE = (
    "I am writing to express my interest in the {role} position. As a {bio}, "
    "I am eager to contribute my skills to your team and grow within your fast-paced environment."
)

DESIGN_SKILLS = (
    "I have a strong foundation in creating wireframes, prototypes, and mockups, and I am highly "
    "proficient in design tools like figma, framer, visily. I am particularly excited about bringing "
    "my experience and creativity to this role and the opportunity to iterate quickly while "
    "collaborating with your team to ship high-quality work. My focus is on continuous learning and "
    "applying a user-centered approach to every project I undertake."
)

SOFTWARE_SKILLS = (
    "I have a strong foundation in software development and problem-solving, and I am proficient in "
    "modern development tools and frameworks. I am particularly excited about bringing my technical "
    "skills and creativity to this role and the opportunity to collaborate with your team to build "
    "high-quality products. My focus is on continuous learning and writing clean, maintainable code."
)

DATA_SKILLS = (
    "I have a strong foundation in data analysis, visualization, and deriving actionable insights. "
    "I am proficient in analytical tools and methodologies. I am particularly excited about bringing "
    "my analytical mindset to this role and the opportunity to work with your team on data-driven "
    "decision making. My focus is on continuous learning and applying best practices in data analysis."
)

GENERAL_SKILLS = (
    "I have a strong foundation in my field and am eager to apply my skills and knowledge to "
    "real-world challenges. I am particularly excited about bringing my dedication and fresh "
    "perspective to this role and the opportunity to collaborate with your team. My focus is on "
    "continuous learning and delivering high-quality results."
)

# Matched against the detected field label; marketing and sales use the general paragraph
SKILLS_PARAGRAPHS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("design", "ui", "ux"), DESIGN_SKILLS),
    (("software", "developer", "engineer"), SOFTWARE_SKILLS),
    (("data", "analyst"), DATA_SKILLS),
)

CLOSING = (
    "Thank you for your time and consideration. I look forward to the possibility of discussing "
    "how my passion and skills can benefit your team."
)

SIGN_OFF = "Best regards,"

LineRule = Tuple[Callable[[Profile], bool], Callable[[Profile], str]]

LINK_LINES: Sequence[LineRule] = (
    (lambda p: bool(p.portfolio), lambda p: f"You can explore my work through my portfolio here: {p.portfolio}."),
    (lambda p: bool(p.figma), lambda p: f"View my Figma designs: {p.figma}."),
    (lambda p: bool(p.resume_link), lambda p: f"I have also attached my resume for your review: {p.resume_link}."),
)

SIGNATURE_LINES: Sequence[LineRule] = (
    (lambda p: bool(p.name), lambda p: p.name.upper()),
    (lambda p: bool(p.phone), lambda p: p.phone),
    (lambda p: bool(p.email), lambda p: p.email),
)

LINKEDIN_SUFFIX = " | LinkedIn"


@dataclass(frozen=True)
class DraftEmail:
    """Subject and body of a generated application email."""
    subject: str
    body: str


def render_lines(rules: Sequence[LineRule], profile: Profile) -> List[str]:
    """Produce the lines whose predicate holds, in table order."""
    return [produce(profile) for applies, produce in rules if applies(profile)]


def extract_role(description: str) -> str:
    """Pull the advertised role out of the description, falling back to a generic title."""
    match = ROLE_PATTERN.search(description)
    return match.group(1).strip() if match else DEFAULT_ROLE


def detect_field(description: str) -> str:
    """Name the industry/field of the listing."""
    lowered = description.lower()
    for markers, field in FIELD_VOCABULARIES:
        if any(marker in lowered for marker in markers):
            return field
    return DEFAULT_FIELD


def select_skills_paragraph(field: str) -> str:
    for markers, paragraph in SKILLS_PARAGRAPHS:
        if any(marker in field for marker in markers):
            return paragraph
    return GENERAL_SKILLS


def compose_subject(role: str, profile: Profile) -> str:
    clean_role = ROLE_WORDS.sub("", role).strip()
    subject = f"Application for {clean_role} Position"
    if profile.name:
        subject += f" - {profile.name}"
    return subject


def compose_signature(profile: Profile) -> str:
    signature = "\n".join([SIGN_OFF] + render_lines(SIGNATURE_LINES, profile))
    if profile.linkedin:
        signature += LINKEDIN_SUFFIX
    return signature


def compose_body(role: str, field: str, profile: Profile) -> str:
    """
    Assemble the email body.

    Paragraphs are separated by a blank line: greeting, opening, skills,
    one paragraph per available link, closing and signature.
    """
    parts = [
        GREETING,
        OPENING_TEMPLATE.format(role=role, bio=profile.bio or DEFAULT_BIO),
        select_skills_paragraph(field),
    ]
    parts.extend(render_lines(LINK_LINES, profile))
    parts.append(CLOSING)
    parts.append(compose_signature(profile))
    return "\n\n".join(parts)


def compose_email(description: str, profile: Optional[Profile] = None) -> DraftEmail:
    """Draft an application email for the given job description."""
    profile = profile or Profile()
    role = extract_role(description)
    field = detect_field(description)
    return DraftEmail(
        subject=compose_subject(role, profile),
        body=compose_body(role, field, profile),
    )


__all__ = [
    'DraftEmail',
    'compose_email',
    'compose_subject',
    'compose_body',
    'compose_signature',
    'extract_role',
    'detect_field',
    'select_skills_paragraph',
    'render_lines',
    'LINK_LINES',
    'SIGNATURE_LINES',
    'DEFAULT_ROLE',
    'DEFAULT_FIELD'
]
