from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ode_method: str = "BDF"
    rtol: float = 1e-6
    atol: float = 1e-12
    n_cells: int = 60
    series_terms: int = 200
    log_level: str = "WARNING"

    class Config:
        env_prefix = "SIPSIM_"


settings = Settings()
