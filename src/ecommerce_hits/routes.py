"""
FastAPI routes for the ecommerce schema test page.

The page posts every captured request URL to ``/hits`` and the parameter
text it is about to send to ``/schema``. Rendering is left to the page.
"""

import json
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from .config import InspectorConfig
from .models import Api, HitReport, KnownSchema
from .params import ParamsSyntaxError, parse_params
from .report import inspect_hit
from .schema import identify_schema

logger = logging.getLogger(__name__)

MISSING_EVENT_WARNING = (
    "Data layer update does not have an event name. No tags will fire."
)


class HitRequest(BaseModel):
    """A captured request URL."""
    url: str


class HitResponse(BaseModel):
    url: str
    reports: list[HitReport]


class SchemaRequest(BaseModel):
    """Parameter text for a gtag() or dataLayer.push() call."""
    api: Api
    params: str = ""


class SchemaResponse(BaseModel):
    api: Api
    schema_id: KnownSchema
    warnings: list[str] = Field(default_factory=list)


def build_observer_script(observer_url: str) -> str:
    """Generate a script that reports every resource request to ``observer_url``.

    Uses a PerformanceObserver on resource entries, so hits sent by any tag
    on the page are seen without patching the tags themselves.
    """
    # "</" is split so the endpoint cannot close the surrounding tag
    url_literal = json.dumps(observer_url).replace("</", "<\\/")
    return f'''<script>
(function(){{
  var url=new URL({url_literal},location.href).href;
  function report(hit){{
    var body=JSON.stringify({{url:hit}});
    if(navigator.sendBeacon){{
      navigator.sendBeacon(url,new Blob([body],{{type:"application/json"}}));
    }}else{{
      fetch(url,{{method:"POST",headers:{{"Content-Type":"application/json"}},body:body,keepalive:true}});
    }}
  }}
  new PerformanceObserver(function(list){{
    list.getEntries().forEach(function(entry){{
      if(entry.name!==url)report(entry.name);
    }});
  }}).observe({{entryTypes:["resource"]}});
}})();
</script>'''


def create_inspector_router(config: InspectorConfig | None = None) -> APIRouter:
    """Create the inspector router.

    Args:
        config: Inspector configuration
    """
    config = config or InspectorConfig()
    router = APIRouter(tags=["ecommerce-hits"])

    @router.post("/hits", response_model=HitResponse)
    async def decode_hit(hit: HitRequest):
        """Decode a captured hit with every matching decoder."""
        return HitResponse(url=hit.url, reports=inspect_hit(hit.url, config))

    @router.post("/schema", response_model=SchemaResponse)
    async def schema_id(body: SchemaRequest):
        """Identify the ecommerce schema of a gtag/dataLayer parameter object."""
        try:
            params = parse_params(body.params, max_length=config.max_params_length)
        except ParamsSyntaxError as e:
            logger.warning(f"Rejected {body.api.value} parameters: {e}")
            raise HTTPException(
                status_code=400,
                detail=f"Error parsing parameters: {e}",
            )

        warnings = []
        if body.api == Api.DATA_LAYER and not (isinstance(params, dict) and params.get("event")):
            warnings.append(MISSING_EVENT_WARNING)

        return SchemaResponse(
            api=body.api,
            schema_id=identify_schema(body.api, params),
            warnings=warnings,
        )

    @router.get("/schemas")
    async def list_schemas():
        """List every schema label identification can return."""
        return {"schemas": [schema.value for schema in KnownSchema]}

    @router.get("/observer.js")
    async def observer_js():
        """Serve the observer script without its <script> wrapper."""
        script = build_observer_script(config.observer_url)
        body = script.removeprefix("<script>").removesuffix("</script>").strip()
        return Response(content=body, media_type="application/javascript")

    return router
