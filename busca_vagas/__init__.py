"""busca_vagas - 호텔 빈방(vagas) 검색 클라이언트"""

__version__ = "1.2.1"
