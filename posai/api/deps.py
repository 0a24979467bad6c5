# posai/api/deps.py
from fastapi import Request
from posai.domain.engine.facade import AIEngine


# Engine built once by the lifespan and shared by every request
def engine_dep(request: Request) -> AIEngine:
    return request.app.state.engine
