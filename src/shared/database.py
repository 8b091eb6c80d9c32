import os
from supabase import create_client, Client

_client: Client = None


def get_supabase_client() -> Client:
    """
    Retorna o cliente Supabase do processo (criado uma única vez).

    Usa a service role key quando disponível: a limpeza precisa apagar
    linhas e objetos do Storage que as policies de RLS bloqueiam para a anon key.
    """
    global _client
    if not _client:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or os.environ.get("SUPABASE_KEY")
        if not url or not key:
            raise ValueError(
                "Configurações do Supabase ausentes (SUPABASE_URL e SUPABASE_SERVICE_ROLE_KEY/SUPABASE_KEY)"
            )
        _client = create_client(url, key)
    return _client
