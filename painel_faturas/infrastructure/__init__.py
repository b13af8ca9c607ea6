"""Infrastructure modules for Painel de Faturas.

- Database: Supabase client wrapper and repository pattern
- Webhook: Invoice automation webhook client
- Storage: Supabase Storage bucket client
- Health: Dependency health checks
"""
