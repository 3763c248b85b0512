"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- stock: 월별 재고 원장
"""
