from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from boringblog.adapters.clock import SystemClock
from boringblog.adapters.sqlite.repos import SQLitePostRepo
from boringblog.api.deps import Settings, get_app_settings, get_clock, get_post_repo, get_rules
from boringblog.components.feeds import ChannelInfo, render_robots, run_rss, run_sitemap
from boringblog.rules.models import Rules

router = APIRouter()

CACHE_HEADERS = {"Cache-Control": "public, max-age=3600"}


@router.get("/feed.xml")
def rss_feed(
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    settings: Settings = Depends(get_app_settings),
    clock: SystemClock = Depends(get_clock),
) -> Response:
    channel = ChannelInfo(
        title=rules.site.title,
        site_url=settings.site_url,
        description=rules.site.description,
        language=rules.site.language,
    )
    xml = run_rss(channel, repo=repo, now=clock.now_utc(), limit=rules.site.feed_item_count)
    return Response(
        content=xml, media_type="application/rss+xml; charset=utf-8", headers=CACHE_HEADERS
    )


@router.get("/sitemap.xml")
def sitemap(
    repo: SQLitePostRepo = Depends(get_post_repo),
    settings: Settings = Depends(get_app_settings),
) -> Response:
    xml = run_sitemap(settings.site_url, repo=repo)
    return Response(content=xml, media_type="application/xml", headers=CACHE_HEADERS)


@router.get("/robots.txt", response_class=PlainTextResponse)
def robots(settings: Settings = Depends(get_app_settings)) -> PlainTextResponse:
    return PlainTextResponse(render_robots(settings.site_url))
