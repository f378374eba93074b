import logging
import os
from datetime import datetime
from typing import Dict

import uvicorn
from fastapi import FastAPI

from forest.api import register_skill_routes
from forest.config import NetworkConfig, load_network_config
from forest.context import DispatchContext
from forest.logging import SERVICE_NAME, configure_logging, log_json
from forest.registry import FOREST_SKILLS
from forest.telemetry import instrument_fastapi, setup_telemetry

# Initialize telemetry before the app boots
setup_telemetry()

app = FastAPI(
    title=SERVICE_NAME,
    description="Forest marketplace skills behind one dispatcher",
    version="0.1.0",
)

instrument_fastapi(app)

logger = configure_logging(SERVICE_NAME)

# Network config is cached per env once CMS has supplied contract addresses;
# gating and routes are still read per dispatch.
_network_configs: Dict[str, NetworkConfig] = {}


async def context_for_env(env: str) -> DispatchContext:
    config = _network_configs.get(env)
    if config is None:
        config = await load_network_config(env=env)
        if config.contracts:
            _network_configs[env] = config
        log_json(
            logging.INFO,
            "network_config_loaded",
            service=SERVICE_NAME,
            env=env,
            api_url=config.api_url,
            cached=bool(config.contracts),
        )
    return DispatchContext(config=config)


register_skill_routes(app, context_factory=context_for_env)


@app.get("/health")
def health():
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "skills": len(FOREST_SKILLS),
        "timestamp": datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("FOREST_PORT", "8080")))
