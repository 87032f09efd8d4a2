import base64

from loguru import logger
from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from errors import ModelInvocationFailed
from prompts import SYSTEM_PROMPT
from utils.pdf_utils import extract_pdf_text

PREVIEW_CHARS = 300


def _image_part(artifact):
    with open(artifact.path, "rb") as f:
        data = base64.b64encode(f.read()).decode("ascii")
    return {"type": "image_url", "image_url": {"url": f"data:{artifact.mimetype};base64,{data}"}}


def _pdf_part(artifact):
    text = extract_pdf_text(artifact.path)
    if not text:
        logger.warning(f"No extractable text in {artifact.filename}; sending it as an empty document")
    return {"type": "text", "text": f"Content of PDF document \"{artifact.filename}\":\n```\n{text}\n```"}


def build_content(prompt, artifacts=(), context=None):
    content = [{"type": "text", "text": prompt}]
    if context:
        content.append({"type": "text", "text": context})
    for artifact in artifacts:
        if artifact.mimetype == "application/pdf":
            content.append(_pdf_part(artifact))
        else:
            content.append(_image_part(artifact))
    return content


class OpenAIModelClient:
    """Sends a prompt plus uploaded artifacts to a chat-completions model."""

    def __init__(self, api_key, model="gpt-4o", timeout=120.0, base_url=None,
                 azure_endpoint=None, api_version=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.base_url = base_url
        self.azure_endpoint = azure_endpoint
        self.api_version = api_version

    @classmethod
    def from_config(cls, config):
        """Return a client, or None when no credential is configured (demo mode)."""
        if not config.model_configured:
            return None
        return cls(
            api_key=config.openai_api_key,
            model=config.openai_model,
            timeout=config.model_timeout_seconds,
            base_url=config.openai_base_url,
            azure_endpoint=config.azure_openai_endpoint,
            api_version=config.azure_openai_api_version,
        )

    def _client(self):
        # one client per call: each async Flask view runs on its own event loop
        if self.azure_endpoint:
            return AsyncAzureOpenAI(
                azure_endpoint=self.azure_endpoint,
                api_version=self.api_version,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout, max_retries=0)

    async def generate(self, prompt, artifacts=(), context=None):
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_content(prompt, artifacts, context)},
        ]
        try:
            async with self._client() as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    response_format={"type": "json_object"},
                    messages=messages,
                    temperature=0,
                )
        except OpenAIError as e:
            logger.error(f"Model call failed ({self.model}): {type(e).__name__}: {e}")
            raise ModelInvocationFailed() from e

        if not response.choices:
            logger.error(f"Model call returned no choices ({self.model})")
            raise ModelInvocationFailed()
        text = response.choices[0].message.content or ""
        logger.debug(f"Model raw response (first {PREVIEW_CHARS} chars): {text[:PREVIEW_CHARS]}")
        return text
