"""Business Agent Service - FastAPI Application"""

import os
import math
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .llm import (
    AllProvidersUnavailableError,
    ChatMessage,
    ProviderUnavailableError,
    QueryComplexity,
    RateLimitedError,
)
from .orchestrator import (
    AgentNotRegisteredError,
    AgentType,
    BusinessTask,
    Orchestrator,
    Priority,
    TaskKind,
)
from .storage import StateStore

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

state_store = StateStore()
_orchestrator: Optional[Orchestrator] = None


def get_orchestrator() -> Orchestrator:
    """Service-wide orchestrator sharing one router and the state store"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator(state_store=state_store)
    return _orchestrator


# Lifespan context
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    try:
        await state_store.connect()
    except Exception as e:
        logger.warning(f"Redis not available, checkpoints disabled: {e}")
    logger.info("Business Agent Service started")

    yield

    # Shutdown
    await state_store.disconnect()
    logger.info("Business Agent Service stopped")


# FastAPI app
app = FastAPI(
    title="Business Agent Service",
    description="Multi-agent business task orchestration with smart LLM routing",
    version="1.0.0",
    lifespan=lifespan
)


# Pydantic models
class TaskRequest(BaseModel):
    """Business task request model"""
    description: str
    priority: Priority = Priority.MEDIUM
    type: TaskKind = TaskKind.MULTI_AGENT
    user_id: str = "anonymous"
    id: Optional[str] = None
    required_agents: List[AgentType] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)
    deadline: Optional[str] = None


class MessageModel(BaseModel):
    role: str
    content: str


class RouteRequest(BaseModel):
    """Raw routed chat request model"""
    messages: List[MessageModel]
    complexity: QueryComplexity = QueryComplexity.MEDIUM
    force_provider: Optional[str] = None


class RouteResponse(BaseModel):
    """Routed chat response model"""
    content: str
    provider: str
    model: str
    reason: Optional[str] = None


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    provider_status = {}
    try:
        provider_status = await get_orchestrator().router.get_provider_status()
    except Exception as e:
        logger.error(f"Error checking providers: {e}")

    return {
        "status": "healthy",
        "state_store": "healthy" if await state_store.health() else "unavailable",
        "providers": provider_status
    }


@app.get("/agents/status")
async def agent_status():
    """Agent and provider status"""
    return await get_orchestrator().get_agent_status()


# Task endpoint
@app.post("/tasks")
async def process_task(request: TaskRequest):
    """
    Plan, execute and synthesize a business task

    Step failures are reported inside the result, not as HTTP errors.
    """
    try:
        task = BusinessTask(**request.model_dump())
        outcome = await get_orchestrator().process_task(task)
        return outcome.to_dict()

    except (ValueError, AgentNotRegisteredError) as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except AllProvidersUnavailableError as e:
        logger.error(f"Providers unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Task error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/llm/route", response_model=RouteResponse)
async def route_chat(request: RouteRequest):
    """Send a chat request through the smart router"""
    try:
        messages = [ChatMessage(role=m.role, content=m.content) for m in request.messages]
        response = await get_orchestrator().router.route(
            messages,
            complexity=request.complexity,
            force_provider=request.force_provider,
        )
        return RouteResponse(
            content=response.content,
            provider=response.provider,
            model=response.model,
            reason=response.decision.reason if response.decision else None,
        )

    except RateLimitedError as e:
        raise HTTPException(
            status_code=429,
            detail=str(e),
            headers={"Retry-After": str(math.ceil(e.retry_after))},
        )
    except (AllProvidersUnavailableError, ProviderUnavailableError) as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8002")))
