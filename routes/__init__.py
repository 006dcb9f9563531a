from .judge.route import router as judge_router
