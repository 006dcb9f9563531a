from sqlmodel import select

from ..base import MySQLService
from .models import Problem, TestCase


class ProblemService(MySQLService):
    async def query_by_primary_key(self, problem_id: int):
        statement = select(Problem).where(Problem.id == problem_id)
        problems = await self.session.exec(statement)
        return problems.first()


class TestCaseService(MySQLService):
    async def query_by_problem_id(self, problem_id: int):
        """
        根据题目ID查询全部测试用例，判题时必须严格按照该顺序执行
        :param problem_id: 题目ID
        :return:
        """
        statement = (
            select(TestCase)
            .where(TestCase.problem_id == problem_id)
            .order_by(TestCase.order_index, TestCase.id)
        )
        test_cases = await self.session.exec(statement)
        return test_cases.all()
