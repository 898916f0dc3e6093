"""
TextGenerationClient -- prompt in, text out.

Responsibility:
    Sends a prompt (and optional system instruction) to the configured
    text-generation endpoint and returns the generated text.  Also holds
    the HR prompt helpers: job descriptions, assistant answers, policy
    documents and knowledge-base articles.

Architecture position:
    Services -- external collaborator adapter.  Uses ``requests``.  No
    kernel state is read or written.

Invariants enforced:
    - ``generate`` never raises for transport or payload failures.  With
      no endpoint configured, or on any error raised while posting or
      decoding, it logs a WARNING and returns the placeholder.

Failure modes:
    - None propagate.
"""

from __future__ import annotations

from typing import Any

import requests

from workforce_kernel.logging_config import get_logger

logger = get_logger("services.text_generation")

DEFAULT_PLACEHOLDER = "AI features are currently unavailable."

HR_ASSISTANT_INSTRUCTION = (
    'You are an AI HR Assistant for a company in Qatar named "{company}". '
    "Answer employee questions based on general Qatar Labor Law and common HR "
    "policies. Keep answers concise, professional and friendly. Do not answer "
    "questions outside the scope of HR."
)
APP_SUPPORT_INSTRUCTION = (
    "You are an AI support agent for an HR application. Help users understand "
    "and use its features, with step-by-step instructions when necessary. Do "
    "not answer questions unrelated to the application."
)
ADMIN_ANALYST_INSTRUCTION = (
    "You are an AI HR Analyst. Answer questions based ONLY on the company data "
    "provided below. If the information is not in the data, say so. Do not "
    "invent data.\n\n{data_context}"
)


class TextGenerationClient:
    """
    Thin HTTP client for a text-generation endpoint.

    The endpoint receives ``{"prompt": ..., "systemInstruction": ...}`` as
    JSON and answers ``{"text": ...}``.
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        timeout_seconds: float = 10.0,
        placeholder: str = DEFAULT_PLACEHOLDER,
        session: requests.Session | None = None,
    ):
        self.endpoint_url = endpoint_url or None
        self.timeout_seconds = timeout_seconds
        self.placeholder = placeholder
        self._session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return self.endpoint_url is not None

    def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
        placeholder: str | None = None,
    ) -> str:
        fallback = placeholder if placeholder is not None else self.placeholder
        if not self.enabled:
            logger.warning("text_generation_disabled", extra={"prompt_chars": len(prompt)})
            return fallback

        body: dict[str, Any] = {"prompt": prompt}
        if system_instruction:
            body["systemInstruction"] = system_instruction
        try:
            response = self._session.post(
                self.endpoint_url, json=body, timeout=self.timeout_seconds
            )
            response.raise_for_status()
            payload = response.json()
        except Exception as exc:
            # Any failure from the session degrades to the placeholder.
            logger.warning(
                "text_generation_failed",
                extra={
                    "endpoint_url": self.endpoint_url,
                    "error": type(exc).__name__,
                    "transport": isinstance(exc, requests.RequestException),
                },
            )
            return fallback

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str) or not text:
            logger.warning("text_generation_empty", extra={"endpoint_url": self.endpoint_url})
            return fallback
        logger.debug("text_generation_completed", extra={"chars": len(text)})
        return text

    def close(self) -> None:
        self._session.close()


def generate_job_description(client: TextGenerationClient, job_title: str) -> str:
    prompt = (
        f'Generate a concise and professional job description for the role of "{job_title}" '
        "at a technology company based in Doha, Qatar. The description should be around "
        "100-150 words and include key responsibilities and qualifications. Do not use markdown."
    )
    return client.generate(
        prompt,
        placeholder=f"This is a placeholder job description for a {job_title}.",
    )


def hr_assistant_response(client: TextGenerationClient, query: str, company_name: str) -> str:
    return client.generate(
        f'An employee has asked the following question: "{query}"',
        system_instruction=HR_ASSISTANT_INSTRUCTION.format(company=company_name),
        placeholder=(
            f'Thank you for your question about "{query}". '
            "For a detailed answer, please speak with your HR Manager."
        ),
    )


def app_support_response(client: TextGenerationClient, query: str) -> str:
    return client.generate(
        f'A user has asked for help with the application. Their question is: "{query}"',
        system_instruction=APP_SUPPORT_INSTRUCTION,
        placeholder='I can help with questions like "How do I run payroll?".',
    )


def admin_assistant_response(client: TextGenerationClient, query: str, data_context: str) -> str:
    return client.generate(
        f'The user has asked the following question: "{query}"',
        system_instruction=ADMIN_ANALYST_INSTRUCTION.format(data_context=data_context),
        placeholder=(
            'I can answer questions like "How many employees are in the '
            'Engineering department?".'
        ),
    )


def generate_hr_policy(client: TextGenerationClient, topic: str, company_name: str) -> str:
    prompt = (
        "Generate a comprehensive and professional HR policy document for a company in "
        f"Qatar named \"{company_name}\" on the topic of '{topic}'. The policy should be "
        "well-structured with clear sections, headings and bullet points, in a formal tone. "
        "Do not use markdown."
    )
    return client.generate(
        prompt, placeholder=f'This is a placeholder for a company policy on "{topic}".'
    )


def generate_knowledge_base_article(
    client: TextGenerationClient, topic: str, company_name: str
) -> str:
    prompt = (
        "Generate a professional, well-structured knowledge base article for a company "
        f'named "{company_name}". The topic is "{topic}". It should be clear, concise and '
        "organized in logical sections. Do not use markdown."
    )
    return client.generate(
        prompt, placeholder=f'This is a placeholder for a knowledge base article on "{topic}".'
    )
