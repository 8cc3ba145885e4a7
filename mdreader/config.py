from pathlib import Path

from pydantic_settings import BaseSettings

MARKDOWN_PATTERNS = ["*.md"]
ALL_TEXT_PATTERNS = ["*.md", "*.markdown", "*.txt"]


class Settings(BaseSettings):
    # Folder settings
    markdown_folder: Path = Path(".")
    file_patterns: list[str] = MARKDOWN_PATTERNS
    excluded_dirs: list[str] = ["node_modules"]
    watch_files: bool = True

    # Cache settings
    cache_ttl_seconds: float = 300.0
    read_batch_size: int = 10

    # Search settings
    search_limit: int = 50
    search_threshold: float = 0.3  # 0 = exact, 1 = anything
    search_name_weight: float = 3.0
    search_content_weight: float = 1.0
    search_min_match_length: int = 2
    search_max_line_matches: int = 5

    # Graph settings
    layout_iterations: int = 100

    # Web server settings
    static_dir: Path = Path("client/dist")
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
