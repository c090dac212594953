from dotenv import load_dotenv
from fastapi import FastAPI

from bootstrapctl.api.middleware import AuthMiddleware
from bootstrapctl.api.routes import phases, reconcile, status

load_dotenv()
app = FastAPI(title="bootstrapctl")
app.add_middleware(AuthMiddleware)

app.include_router(phases.router)

app.include_router(reconcile.router)

app.include_router(status.router)


def serve(host: str = "0.0.0.0", port: int = 8080):
    import uvicorn
    uvicorn.run(app, host=host, port=port)
