#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                🎯 Control Center API - Airis-SH                              ║
║                  Layer 3: Device status, contacts & SOS alerts               ║
╚══════════════════════════════════════════════════════════════════════════════╝

API FastAPI para:
- Conectar/desconectar el dispositivo AirMouse y consultar su estado
- Gestionar contactos de emergencia y la plantilla de mensaje
- Disparar un SOS de prueba y consultar el historial de alertas
- Transmitir estados de alerta en tiempo real via SSE

Usage:
    python -m action_layer.api --transport simulated

    o con uvicorn:
    uvicorn action_layer.api:app --reload --port 8001
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from alert_core.models import Contact, describe_status, classify_status
from alert_core.validator import validate_contact
from device_link.config import config as link_config

from .control_center import ControlCenter, get_control_center
from .settings_store import ContactNotFoundError


# ═══════════════════════════════════════════════════════════════════════════════
# Configuración de Logging
# ═══════════════════════════════════════════════════════════════════════════════

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s"
)
logger = logging.getLogger("action_layer.api")


# ═══════════════════════════════════════════════════════════════════════════════
# FastAPI App
# ═══════════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="🎯 Airis-SH Control Center API",
    description="Device link & emergency alert pipeline for the AirMouse",
    version="1.0.0",
)

# CORS para desarrollo - permite conexión desde la UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════════════════════════
# Pydantic Models
# ═══════════════════════════════════════════════════════════════════════════════

class ContactInput(BaseModel):
    """Contacto enviado por la UI del cuidador."""
    name: str = ""
    phone: str = ""
    email: str = ""


class ContactUpdate(BaseModel):
    """Actualización parcial de un contacto."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class SettingsUpdate(BaseModel):
    """Actualización parcial de la configuración."""
    message_template: Optional[str] = None
    sos_enabled: Optional[bool] = None


class NotifyInput(BaseModel):
    """Byte de notificación inyectado (transporte simulado)."""
    value: int = Field(..., ge=0, le=255)


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[str]


class AlertResponse(BaseModel):
    """Resultado de un ciclo de alerta."""
    level: str
    summary: str
    status: Dict[str, Any]


class HealthResponse(BaseModel):
    """Respuesta del health check."""
    status: str
    timestamp: str
    device_connected: bool


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def center() -> ControlCenter:
    return get_control_center()


def _validated(contact: Contact) -> Contact:
    result = validate_contact(contact)
    if not result.valid:
        raise HTTPException(
            status_code=422,
            detail={"errors": list(result.errors)}
        )
    return contact


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Health & Info
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/", tags=["Health"])
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "service": "Airis-SH Control Center API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "device": "/api/device/status",
            "contacts": "/api/contacts",
            "sos": "/api/sos/test",
            "stream": "/api/alerts/stream"
        }
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Verifica el estado del servicio."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
        device_connected=center().session.get_connected()
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Device Link
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/api/device/status", tags=["Device"])
async def device_status():
    """🔗 Estado del enlace, del coordinador y del supervisor."""
    return center().get_status()


@app.post("/api/device/connect", tags=["Device"])
async def device_connect():
    """🔗 Intenta conectar con el dispositivo AirMouse."""
    connected = await center().start()
    return {"connected": connected, "device_name": center().session.get_device_name()}


@app.post("/api/device/disconnect", tags=["Device"])
async def device_disconnect():
    """🔌 Desconecta el dispositivo."""
    await center().supervisor.disconnect()
    return {"connected": False}


@app.post("/api/device/notify", tags=["Device"])
async def device_notify(data: NotifyInput):
    """
    🧪 Inyecta un byte de notificación en el transporte simulado.

    Solo disponible con el transporte "simulated".
    """
    transport = center().transport
    push = getattr(transport, "push", None)
    if push is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Transport '{transport.name}' does not accept injected notifications"
        )
    delivered = push(data.value)
    return {"value": data.value, "delivered": delivered}


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Contacts & Settings
# ═══════════════════════════════════════════════════════════════════════════════

@app.get("/api/contacts", tags=["Contacts"])
async def list_contacts():
    contacts = center().store.get_contacts()
    return {"total": len(contacts), "contacts": [c.to_dict() for c in contacts]}


@app.post("/api/contacts", status_code=status.HTTP_201_CREATED, tags=["Contacts"])
async def create_contact(data: ContactInput):
    """➕ Agrega un contacto de emergencia validado."""
    _validated(Contact(id=0, name=data.name, phone=data.phone, email=data.email))
    contact = center().store.add_contact(name=data.name, phone=data.phone, email=data.email)
    return contact.to_dict()


@app.put("/api/contacts/{contact_id}", tags=["Contacts"])
async def update_contact(contact_id: int, data: ContactUpdate):
    """✏️ Modifica un contacto existente."""
    store = center().store
    try:
        current = store.get_contact(contact_id)
    except ContactNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    fields = data.model_dump(exclude_none=True)
    candidate = Contact.from_dict({**current.to_dict(), **fields})
    _validated(candidate)
    return store.update_contact(contact_id, **fields).to_dict()


@app.delete("/api/contacts/{contact_id}", tags=["Contacts"])
async def delete_contact(contact_id: int):
    """🗑️ Elimina un contacto."""
    try:
        center().store.remove_contact(contact_id)
    except ContactNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"message": "Contact removed", "success": True}


@app.post("/api/contacts/validate", response_model=ValidationResponse, tags=["Contacts"])
async def validate(data: ContactInput):
    """✅ Valida un contacto sin guardarlo."""
    result = validate_contact(Contact(id=0, name=data.name, phone=data.phone, email=data.email))
    return ValidationResponse(valid=result.valid, errors=list(result.errors))


@app.get("/api/settings", tags=["Settings"])
async def get_settings():
    return center().store.get_settings().to_dict()


@app.put("/api/settings", tags=["Settings"])
async def update_settings(data: SettingsUpdate):
    store = center().store
    if data.message_template is not None:
        store.set_message_template(data.message_template)
    if data.sos_enabled is not None:
        store.set_sos_enabled(data.sos_enabled)
    return store.get_settings().to_dict()


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints - Alerts
# ═══════════════════════════════════════════════════════════════════════════════

@app.post("/api/sos/test", response_model=AlertResponse, tags=["Alerts"])
async def test_sos():
    """🚨 Ejecuta el ciclo de alerta completo manualmente."""
    result = await center().coordinator.trigger_test_alert()
    return AlertResponse(
        level=classify_status(result).value,
        summary=describe_status(result),
        status=result.to_dict()
    )


@app.get("/api/alerts", tags=["Alerts"])
async def get_alerts(limit: int = Query(50, ge=1, le=200)):
    """🔔 Historial de estados de alerta."""
    alerts = center().coordinator.get_alerts(limit)
    return {"total": len(alerts), "alerts": alerts}


async def event_generator():
    """Generador de eventos SSE."""
    queue = center().coordinator.create_event_queue()

    try:
        yield f"event: connected\ndata: {json.dumps({'status': 'connected', 'timestamp': datetime.now().isoformat()})}\n\n"

        while True:
            try:
                entry = await asyncio.wait_for(queue.get(), timeout=30.0)
                yield f"event: alert\ndata: {json.dumps(entry, ensure_ascii=False)}\n\n"
            except asyncio.TimeoutError:
                # Heartbeat cada 30 segundos
                yield f"event: heartbeat\ndata: {json.dumps({'timestamp': datetime.now().isoformat()})}\n\n"

    except asyncio.CancelledError:
        pass


@app.get("/api/alerts/stream", tags=["Real-time"])
async def stream_alerts():
    """
    📡 Stream de estados de alerta via Server-Sent Events (SSE).

    Eventos:
    - `connected`: Conexión establecida
    - `alert`: Nuevo estado de alerta
    - `heartbeat`: Keep-alive cada 30 segundos
    """
    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Main Entry Point
# ═══════════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    import uvicorn

    parser = argparse.ArgumentParser(description="🎯 Airis-SH Control Center API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8001)
    parser.add_argument(
        "--transport",
        choices=["bleak", "simulated"],
        default=None,
        help="Transporte del enlace (default: AIRIS_LINK_TRANSPORT o bleak)"
    )
    args = parser.parse_args()

    if args.transport:
        link_config.transport = args.transport

    print("""
╔══════════════════════════════════════════════════════════════════════════════╗
║                    🎯 Airis-SH Control Center API                            ║
║                  Device Link & Emergency Alert Pipeline                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "action_layer.api:app",
        host=args.host,
        port=args.port,
        log_level="info",
    )
