"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- session: PIN 세션
- banks: 은행 및 원장
- cards: 신용카드
- loans: 대출
- transactions: 지출 거래
- ipos: IPO 청약
- persons: 인물
- dashboard: 대시보드 집계
"""
