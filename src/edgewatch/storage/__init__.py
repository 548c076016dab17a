"""DuckDB storage for the local edge mirror."""
