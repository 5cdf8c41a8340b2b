"""
FastAPI dependencies for objects built once by the application factory.

create_app() stores the settings and the code generator on app.state;
these functions hand them to endpoints so nothing is read from module
globals at request time.
"""

from fastapi import Request

from urlsh.core.setting import Settings
from urlsh.gen.shortener import CodeGenerator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_code_generator(request: Request) -> CodeGenerator:
    return request.app.state.generator
