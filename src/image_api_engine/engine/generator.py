"""Image generation pipeline: build the request, call the API, extract images."""

import logging

from pydantic import BaseModel

from image_api_engine.client import HttpClient
from image_api_engine.engine.extract import extract_images
from image_api_engine.engine.request import PreparedRequest, build_request
from image_api_engine.engine.values import ValueMap
from image_api_engine.errors import TransportError
from image_api_engine.parser.base import ApiConfig

logger = logging.getLogger(__name__)


class GenerationResult(BaseModel):
    """Images produced by one generate() call."""

    api_name: str
    generation: int
    request: PreparedRequest
    images: list[str]


class ImageGenerator:
    """Runs image API configs and tracks which call is the latest.

    Calls are never cancelled. Each call is numbered, and `is_current`
    tells whether a result belongs to the most recent call so callers
    can drop results that were superseded while in flight.
    """

    def __init__(self, client: HttpClient | None = None):
        self.client = client or HttpClient()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, result: GenerationResult) -> bool:
        return result.generation == self._generation

    async def generate(self, config: ApiConfig, values: ValueMap) -> GenerationResult:
        """Call the API described by config and return the images it produced.

        Transport failures are logged and give an empty image list.
        """
        self._generation += 1
        generation = self._generation

        request = build_request(config.content, values)
        logger.info("Making %s request to %s", request.method, request.url)
        if request.body:
            logger.debug("Request body: %s", request.body)

        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers or None,
                content=request.body,
            )
        except TransportError as exc:
            logger.error("Failed to generate images with %s: %s", config.name, exc)
            images: list[str] = []
        else:
            images = extract_images(config.content.response.image, response.headers, response.content)

        return GenerationResult(api_name=config.name, generation=generation, request=request, images=images)
