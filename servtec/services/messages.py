"""
Outbound message templates (Spanish, as sent to the service group)
"""
from servtec.models.schemas import (
    DailySummary,
    Priority,
    Resolution,
    StatusReport,
    Ticket,
    TicketState,
)

PRIORITY_LABELS = {
    Priority.CRITICAL: "Crítica",
    Priority.HIGH: "Alta",
    Priority.MEDIUM: "Media",
    Priority.LOW: "Baja",
}

PRIORITY_EMOJI = {
    Priority.CRITICAL: "🚨",
    Priority.HIGH: "⚠️",
    Priority.MEDIUM: "🔧",
    Priority.LOW: "📝",
}

STATE_LABELS = {
    TicketState.PENDING: "Pendiente",
    TicketState.IN_PROGRESS: "En proceso",
    TicketState.WAITING_PARTS: "Esperando repuestos",
    TicketState.DONE: "Finalizado",
}

CREATION_FAILED = (
    "❌ Error: No se pudo crear el ticket automáticamente. "
    "Por favor, crear manualmente."
)


def _equipment_lines(resolution: Resolution, default: str) -> str:
    lines = f"🔧 Equipo: {resolution.equipment_display or default}"
    if resolution.component:
        lines += f"\n🔩 Componente: {resolution.component}"
    return lines


def group_confirmation(ticket: Ticket, resolution: Resolution, handler_name: str) -> str:
    """Confirmation posted to the shared channel after creation"""
    label = PRIORITY_LABELS[ticket.priority]
    return (
        f"✅ Ticket {ticket.document_number} creado\n\n"
        f"🏢 Cliente: {resolution.client_display or 'Por definir'}\n"
        f"{_equipment_lines(resolution, 'Por definir')}\n"
        f"{PRIORITY_EMOJI[ticket.priority]} Prioridad: {label}\n"
        f"👨‍🔧 Técnico: {handler_name}\n\n"
        f"{handler_name} será notificado automáticamente."
    )


def handler_notification(ticket: Ticket, resolution: Resolution) -> str:
    """Private notification to the assigned handler"""
    critical = ticket.priority == Priority.CRITICAL
    lines = [
        f"{'🚨 URGENTE - ' if critical else ''}Nuevo ticket {ticket.document_number}",
        "",
        f"🏢 Cliente: {resolution.client_display or 'Cliente desde WhatsApp'}",
        _equipment_lines(resolution, "Equipo por definir"),
    ]
    if ticket.contact_address:
        lines.append(f"📱 Teléfono: {ticket.contact_address}")
    lines += [
        f"⚠️ Prioridad: {PRIORITY_LABELS[ticket.priority]}",
        "",
        f"📝 Problema: {ticket.description}",
        "",
        "⚡ Requiere atención inmediata." if critical else "✅ Responde cuando puedas atender.",
    ]
    return "\n".join(lines)


def critical_alert(ticket: Ticket, resolution: Resolution, handler_name: str) -> str:
    """Supervisor alert for a newly created critical ticket"""
    return (
        f"🚨 TICKET CRÍTICO CREADO:\n\n"
        f"🎫 #{ticket.document_number}\n"
        f"🏢 Cliente: {resolution.client_display or 'Cliente WhatsApp'}\n"
        f"🔧 Problema: {ticket.description}\n\n"
        f"{handler_name} ha sido notificado automáticamente."
    )


def reminder(ticket: Ticket, hours: int) -> str:
    """Tiered reminder to the handler"""
    number = ticket.document_number
    critical = ticket.priority == Priority.CRITICAL
    lines = [
        f"{'🚨' if critical else '⏰'} Recordatorio {number}",
        "",
        f"🏢 Cliente: {ticket.client_name or 'Por definir'}",
        f"⚠️ Estado: {STATE_LABELS[ticket.state]} ({hours}h sin actualizar)",
    ]
    if ticket.contact_address:
        lines.append(f"📱 Teléfono: {ticket.contact_address}")
    lines += [
        "",
        "🚨 CRÍTICO - Requiere atención inmediata" if critical else "📋 Pendiente de atención",
        "",
        "Responde:",
        f'✅ "Listo {number}" - Completado',
        f'🔧 "Proceso {number}" - En proceso',
        f'⏸️ "Repuesto {number}" - Esperando repuestos',
        f'❌ "Problema {number} [motivo]" - Hay inconveniente',
    ]
    return "\n".join(lines)


def escalation(ticket: Ticket, hours: int, handler_name: str) -> str:
    """Shared-channel broadcast for a long-stale critical ticket"""
    return (
        f"🚨 ATENCIÓN: Ticket crítico {ticket.document_number} "
        f"lleva {hours}h sin actualizar\n\n"
        f"🏢 Cliente: {ticket.client_name or 'Por definir'}\n"
        f"👨‍🔧 @{handler_name} ¿necesitas apoyo con este caso?"
    )


def daily_summary(summary: DailySummary) -> str:
    lines = [
        f"📊 REPORTE DIARIO ServTec ({summary.day.isoformat()}):",
        "",
        f"🆕 Creados hoy: {summary.created}",
        f"✅ Completados hoy: {summary.completed}",
        f"⏳ Pendientes: {summary.pending}",
        f"🔧 En proceso: {summary.in_progress}",
        f"⏸️ Esperando repuestos: {summary.waiting_parts}",
        f"🚨 Críticos sin atender: {summary.critical_open}",
        f"⚠️ Vencidos (+24h): {summary.sla_breached}",
    ]
    if summary.sla_breached > 0:
        lines.append(
            f"\n🔥 ATENCIÓN: {summary.sla_breached} tickets vencidos requieren seguimiento urgente"
        )
    if summary.critical_open > 0:
        lines.append(f"🚨 HAY {summary.critical_open} TICKETS CRÍTICOS PENDIENTES")
    lines.append("\nSistema funcionando correctamente ✅")
    return "\n".join(lines)


def status(report: StatusReport) -> str:
    critical = report.critical_open
    return (
        f"📊 Tu estado actual:\n\n"
        f"⏳ Pendientes: {report.count(TicketState.PENDING)}\n"
        f"🔧 En proceso: {report.count(TicketState.IN_PROGRESS)}\n"
        f"⏸️ Esperando repuestos: {report.count(TicketState.WAITING_PARTS)}\n"
        f"🚨 Críticos: {critical}\n"
        f"✅ Completados hoy: {report.completed_today}\n\n"
        + ("⚡ Hay tickets críticos que requieren atención" if critical > 0 else "✅ Todo bajo control")
    )


# ----------------------------------------------------------------------
# Command acknowledgements
# ----------------------------------------------------------------------
def ack_complete(number: str) -> str:
    return f"✅ Ticket {number} marcado como completado"


def completed_broadcast(number: str, handler_name: str) -> str:
    return f"✅ Ticket {number} completado por {handler_name}"


def ack_start(number: str) -> str:
    return f'🔧 Ticket {number} marcado como "En proceso"'


def ack_hold(number: str) -> str:
    return (
        f"⏸️ Ticket {number} pausado - esperando repuestos. "
        f"No recibirás más recordatorios hasta que cambies el estado."
    )


def ack_resume(number: str) -> str:
    return f"▶️ Ticket {number} reanudado y pendiente de atención"


def ack_problem(number: str) -> str:
    return f"❌ Ticket {number} marcado con problema. Gerencia será notificada."


def problem_alert(number: str, detail: str, handler_name: str) -> str:
    return (
        f"🚨 PROBLEMA con ticket {number}\n\n"
        f"{handler_name} reporta: {detail}\n\n"
        f"Requiere atención de gerencia."
    )

