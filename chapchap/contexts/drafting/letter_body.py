"""Default cover-letter paragraphs built from the job and strengths steps."""

from typing import List

from chapchap.contexts.drafting.document_model import LetterData

DEFAULT_STRENGTHS = ["dedication", "professionalism", "teamwork"]


def _join_strengths(strengths: List[str]) -> str:
    """Join as: a / a and b / a, b, and c (lowercased)."""
    words = [s.lower() for s in strengths]
    if len(words) == 1:
        return words[0]
    if len(words) == 2:
        return f"{words[0]} and {words[1]}"
    return f"{', '.join(words[:-1])}, and {words[-1]}"


def generate_letter_body(letter: LetterData) -> List[str]:
    """
    Compose the four standard paragraphs: opening, strengths, company, closing.

    Used to pre-fill a letter draft that has no paragraphs yet. Pure function
    of the draft, so the same draft always yields the same text.
    """
    job = letter.job
    company = job.company or letter.recipient.company or "your organization"
    job_title = job.title or "open"
    remote_note = " (remote)" if job.is_remote else ""
    strengths = _join_strengths([s for s in letter.strengths if s] or DEFAULT_STRENGTHS)

    opening = (
        f"I am writing to express my strong interest in the {job_title}{remote_note} position "
        f"at {company}. Having researched your company and its values, I am confident that my "
        "background and skills make me an excellent fit for this role."
    )
    strengths_paragraph = (
        f"Throughout my career, I have developed strong {strengths} skills that have consistently "
        "enabled me to deliver results. These competencies, combined with my passion for "
        "excellence, have allowed me to make meaningful contributions in every role I have held."
    )
    if job.description:
        company_paragraph = (
            f"I am particularly drawn to {company} because the role aligns closely with my "
            "experience. Based on the job description, I am confident I can contribute to your "
            "team's goals and help drive the company's continued success."
        )
    else:
        company_paragraph = (
            f"I am particularly drawn to {company} and am excited about the opportunity to "
            "contribute to your team. I believe my skills and experience align well with your "
            "company's mission, and I am eager to bring my expertise to help drive continued success."
        )
    closing = (
        "Thank you for considering my application. I would welcome the opportunity to discuss how "
        f"my qualifications and experience can benefit {company}. I look forward to hearing from "
        "you at your earliest convenience."
    )

    return [opening, strengths_paragraph, company_paragraph, closing]


def with_default_body(letter: LetterData) -> LetterData:
    """Return the letter unchanged if it has paragraphs, else a copy with generated ones."""
    if any(p.strip() for p in letter.paragraphs):
        return letter
    return letter.model_copy(update={"paragraphs": generate_letter_body(letter)}, deep=True)
