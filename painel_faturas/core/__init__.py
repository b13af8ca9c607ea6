"""Core background logic for Painel de Faturas."""
