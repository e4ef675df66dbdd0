"""Data-service integration — environment, lazy client factory, typed RPC.

The Supabase client itself is an optional dependency
(``pip install supaedge[supabase]``); contexts only build one when a
handler first asks for it.

    from supaedge.data import DataServiceEnv, define_rpc
"""

from supaedge.data.env import DataServiceEnv
from supaedge.data.rpc import RpcDefinition, define_rpc

__all__ = [
    "DataServiceEnv",
    "RpcDefinition",
    "define_rpc",
]
