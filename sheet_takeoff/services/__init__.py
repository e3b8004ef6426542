"""서비스 패키지"""
