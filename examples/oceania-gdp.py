import pyarrow.compute as pc

from tabground.charts import ChartSpec, draw
from tabground.dataframe import Dataframe, FunctionCallExpression, col

oceania = Dataframe.from_dataset("gapminder") \
  .filter(FunctionCallExpression(pc.equal, col("continent"), "Oceania")) \
  .select("country", "year", "gdp_per_capita")

print(oceania)
print(draw(oceania.plot(ChartSpec("line", x="year", y="gdp_per_capita", color="country")),
           "charts/oceania_gdp.html"))
