"""Modelos y vocabulario del dominio.

Por qué:
- Pedidos, ventanas, ciclos y reportes son datos puros (Pydantic v2).
- El dominio no conoce el store, la CLI ni el reloj del sistema.
"""
