"""
Integration tests package.

Tests que tocan el backend SQL (SQLite vía aiosqlite) o la app completa:
- Repositorios SQL y flujo reserva/verificación/cancelación
- Reintento de transacciones ante deadlock
- Health checks

Para ejecutar solo tests de integración:
    pytest -m integration
"""
