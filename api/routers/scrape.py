from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictStr

from scrapers.pipeline import ScrapePipeline

log = logging.getLogger(__name__)

router = APIRouter(tags=["scrape"])


class ScrapeRequest(BaseModel):
    urls: list[StrictStr] = Field(min_length=1)


def get_pipeline() -> ScrapePipeline:
    return ScrapePipeline()


@router.post("/scrape")
async def scrape(
    body: ScrapeRequest,
    pipeline: ScrapePipeline = Depends(get_pipeline),
):
    log.info("Received request to scrape %d URLs.", len(body.urls))
    try:
        results = await pipeline.run(body.urls)
    except Exception as e:
        log.exception("Error during scraping process")
        return JSONResponse(
            status_code=500,
            content={
                "error": "An internal server error occurred during scraping.",
                "details": str(e),
            },
        )
    return [r.to_dict() for r in results]
