import json

import azure.functions as func
from fastapi import FastAPI

from catalog_api.app import create_app
from catalog_api.errors import GENERIC_FAULT_MESSAGE, error_body
from catalog_api.logging_config import logger, tracer

app = create_app()

asgi_middleware = func.AsgiMiddleware(app)

function_app = func.FunctionApp()


async def forward_request(
    application: FastAPI, middleware: func.AsgiMiddleware, req: func.HttpRequest
) -> func.HttpResponse:
    """
    Open the store if needed and hand the request to FastAPI.

    Starlette re-raises unexpected exceptions after rendering them, and
    opening the store runs outside any FastAPI handler, so both end here
    as a GenericFault body.
    """
    with tracer.start_as_current_span("process_request") as span:
        span.set_attribute("http.method", req.method)
        span.set_attribute("http.url", str(req.url))
        span.set_attribute("http.route", req.route_params.get('route', ''))

        logger.info(
            f"Processing {req.method} request",
            extra={
                "method": req.method,
                "path": str(req.url),
                "route": req.route_params.get('route', '')
            }
        )

        try:
            # The Functions host does not drive the ASGI lifespan; open() is idempotent
            await application.state.store.open()
            response = await middleware.handle_async(req)
            span.set_attribute("http.status_code", response.status_code)
            return response
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)

            logger.error(
                f"Error processing request: {type(e).__name__}",
                extra={"error_type": type(e).__name__},
                exc_info=True,
            )
            return func.HttpResponse(
                body=json.dumps(error_body(500, GENERIC_FAULT_MESSAGE)),
                status_code=500,
                mimetype="application/json",
            )


@function_app.route(route="{*route}", auth_level=func.AuthLevel.ANONYMOUS)
async def main(req: func.HttpRequest) -> func.HttpResponse:
    """Azure Functions entry-point routed through FastAPI."""
    return await forward_request(app, asgi_middleware, req)
