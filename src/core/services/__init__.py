"""Servicios del Core: kernel de calendario, canonizador, ventanas y lotes."""
