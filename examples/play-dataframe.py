import pyarrow.compute as pc

from tabground.dataframe import Dataframe, FunctionCallExpression, col

df = Dataframe.from_dataset("gapminder") \
  .filter(FunctionCallExpression(pc.equal, col("year"), 2007)) \
  .mutate(pop_millions=FunctionCallExpression(pc.divide, col("population"), 1e6)) \
  .arrange("life_expectancy", descending=True) \
  .select("country", "continent", "pop_millions", "life_expectancy") \
  .collect()

print(df)
