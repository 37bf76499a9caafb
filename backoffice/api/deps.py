"""
Shared route dependencies
"""
from fastapi import Request

from backoffice.core.config import Settings


def get_settings(request: Request) -> Settings:
    """Settings the running application was built with"""
    return request.app.state.settings
