from fastapi import Request

from stride_pulse.services.session import SessionController


# Dependency: the controller created at startup in main.py
def get_controller(request: Request) -> SessionController:
    return request.app.state.controller
