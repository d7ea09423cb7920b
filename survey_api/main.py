import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError

from survey_api.core import config
from survey_api.database import ensure_indexes
from survey_api.routes import auth_routes, feedback_routes, payment_routes, survey_routes, user_routes

app = FastAPI(title='Survey API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=config.CORS_ALLOW_ORIGINS != ['*'],
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        ensure_indexes()
    except PyMongoError:
        logger.exception('Index initialization failed. Check MONGODB_URI and MongoDB credentials.')


@app.exception_handler(PyMongoError)
def handle_store_error(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.exception('Document store failure on %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={'detail': 'internal server error'},
    )


@app.get('/', response_class=PlainTextResponse)
def root():
    return 'Crud is running...'


app.include_router(auth_routes.router)
app.include_router(user_routes.router, prefix='/users')
app.include_router(survey_routes.router, prefix='/api/v1')
app.include_router(feedback_routes.router, prefix='/api/v1')
app.include_router(payment_routes.router)


def run() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logger.info('Survey API listening on port %s', config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == '__main__':
    run()
