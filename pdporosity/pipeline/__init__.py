"""시뮬레이션 파이프라인 — 설정, 실행, CLI."""
