from dataclasses import dataclass

@dataclass
class Settings:
    max_hops: int = 30
    timeout_s: float = 2.0
    dest_port: int = 33434            # traceroute convention, almost always closed

    # listener socket
    bind_addr: str = "0.0.0.0"
    recv_bufsize: int = 1500
