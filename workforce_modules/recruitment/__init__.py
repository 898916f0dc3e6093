"""Recruitment Module -- job openings, candidates and hiring."""

from workforce_modules.recruitment.service import RecruitmentService

__all__ = ["RecruitmentService"]
