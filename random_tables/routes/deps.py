from fastapi import Request

from random_tables.config import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
