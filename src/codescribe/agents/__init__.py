"""
Agents module for documentation generation
"""
from codescribe.agents.llm import create_chat_model
from codescribe.agents.ai_gateway import AIGateway

__all__ = [
    'create_chat_model',
    'AIGateway',
]
