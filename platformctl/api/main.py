from dotenv import load_dotenv
from fastapi import FastAPI

from platformctl.api.middleware import AuthMiddleware
from platformctl.api.routes import compose, lookup

load_dotenv()
app = FastAPI(title="platformctl")
app.add_middleware(AuthMiddleware)

app.include_router(compose.router)
app.include_router(lookup.router)
