# Path: src/shared/utilities/network.py
from fastapi import Request
from user_agents import parse


def parse_user_agent(user_agent: str) -> dict:
    """Parse User-Agent string to extract device and browser information."""
    agent = parse(user_agent or "")
    return {
        "device_type": "Mobile" if agent.is_mobile else "Tablet" if agent.is_tablet else "PC" if agent.is_pc else "Other",
        "os": agent.os.family or "Unknown",
        "browser": agent.browser.family or "Unknown",
    }


async def extract_client_ip(request: Request) -> str:
    """Extract the client's IP address from the request headers or client host."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def extract_user_agent(request: Request) -> str:
    return request.headers.get("User-Agent", "Unknown")
