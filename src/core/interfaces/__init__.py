"""Interfaces/abstracciones del Core.

Por qué:
- El store de pedidos es un colaborador externo; aquí vive su contrato.
- El Core depende de la abstracción, nunca de Firestore ni de archivos.
"""
