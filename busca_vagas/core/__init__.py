"""Core 설정/예외/로깅 패키지."""
